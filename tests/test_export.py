"""Tests for JSON/CSV export of query results."""

import json

import pandas as pd
import pytest

from filmindex.export import (
    export_best_by_year, export_titles, resolve_export_path, titles_to_frame, write_frame,
)
from filmindex.models import Title


@pytest.fixture
def titles():
    return [
        Title("tt1", title_type="movie", primary_title="One", start_year=2000,
              genres=["Drama", "Romance"], directors=["nm1"], writers=["nm1", "nm2"],
              average_rating=7.5, num_votes=100),
        Title("tt2", title_type="movie", primary_title="Two", start_year=2001, genres=["Drama"]),
    ]


def test_export_titles_json(tmp_path, titles):
    path = export_titles(titles, tmp_path / "same", "json")
    assert path.name == "same.json"
    rows = json.loads(path.read_text(encoding="utf-8"))
    assert [row["tconst"] for row in rows] == ["tt1", "tt2"]
    assert rows[0]["genres"] == ["Drama", "Romance"]
    assert rows[0]["writers"] == ["nm1", "nm2"]


def test_export_titles_csv_joins_lists(tmp_path, titles):
    path = export_titles(titles, tmp_path / "out" / "same.json", "csv")
    assert path.name == "same.csv"
    frame = pd.read_csv(path)
    assert list(frame["tconst"]) == ["tt1", "tt2"]
    assert frame.loc[0, "genres"] == "Drama,Romance"
    assert frame.loc[0, "writers"] == "nm1,nm2"


def test_export_best_by_year(tmp_path, titles):
    path = export_best_by_year({2000: titles[0], 2001: titles[1]}, tmp_path / "drama", "json")
    rows = json.loads(path.read_text(encoding="utf-8"))
    assert [(row["year"], row["tconst"]) for row in rows] == [(2000, "tt1"), (2001, "tt2")]


def test_empty_results_keep_columns(tmp_path):
    frame = titles_to_frame([])
    assert "tconst" in frame.columns
    assert len(frame) == 0
    path = export_best_by_year({}, tmp_path / "none", "csv")
    assert pd.read_csv(path).columns[0] == "year"


def test_unknown_format_rejected(tmp_path, titles):
    with pytest.raises(ValueError):
        write_frame(titles_to_frame(titles), tmp_path / "x", "parquet")


def test_relative_path_resolved_against_exports_dir(tmp_path, titles):
    path = export_titles(titles, "same", "csv", exports_dir=tmp_path / "exports")
    assert path == tmp_path / "exports" / "same.csv"
    assert path.exists()


def test_absolute_path_ignores_exports_dir(tmp_path):
    target = tmp_path / "elsewhere" / "best"
    assert resolve_export_path(target, tmp_path / "exports") == target
