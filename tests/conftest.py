"""Shared pytest fixtures for filmindex tests.

Provides small IMDb-shaped TSV datasets, an in-memory resource locator,
loader settings without progress bars, and a frozen store built from the
fixture datasets.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict

import pytest

from filmindex.config import Config, LoadingConfig, LoggingConfig
from filmindex.errors import ResourceNotFound
from filmindex.loader import IngestionCoordinator
from filmindex.resources import ResourceLocator
from filmindex.store import EntityStore


N = r"\N"


def tsv(*rows) -> str:
    """Join rows (header first) into TSV text."""
    return "".join("\t".join(row) + "\n" for row in rows)


NAMES = tsv(
    ["nconst", "primaryName", "birthYear", "deathYear", "primaryProfession", "knownForTitles"],
    ["nm0000001", "Fred Astaire", "1899", "1987", "actor,soundtrack", "tt0000001,tt0000007"],
    ["nm0000002", "Alive Auteur", "1950", N, "director,writer", "tt0000002"],
    ["nm0000003", "Second Actor", "1960", N, "actor", N],
    ["nm0000004", "Third Actor", "1970", N, "actress", ""],
)

TITLES = tsv(
    ["tconst", "titleType", "primaryTitle", "originalTitle", "isAdult",
     "startYear", "endYear", "runtimeMinutes", "genres"],
    ["tt0000001", "short", "Carmencita", "Carmencita", "0", "1894", N, "1", "Documentary,Short"],
    ["tt0000002", "movie", "Auteur Piece", "Auteur Piece", "0", "1999", N, "120", "Comedy"],
    ["tt0000003", "movie", "Big Drama", "Big Drama", "0", "2000", N, "100", "Drama"],
    ["tt0000004", "movie", "Small Drama", "Small Drama", "0", "2000", N, "90", "Drama,Romance"],
    ["tt0000005", "movie", "Lone Drama", "Lone Drama", "0", "2001", N, "95", "Drama"],
    ["tt0000006", "movie", "Undated", "Undated", "0", N, N, N, "Drama"],
    ["tt0000007", "movie", "Dead Auteur", "Dead Auteur", "0", "1950", N, "80", "Western"],
    ["tt0000008", "movie", "Two Directors", "Two Directors", "0", "2005", N, "100", "Comedy"],
    ["tt0000009", "movie", "Ghost Credit", "Ghost Credit", "1", "2010", N, "85", "Horror"],
)

CREW = tsv(
    ["tconst", "directors", "writers"],
    ["tt0000002", "nm0000002", "nm0000002"],
    ["tt0000003", N, N],
    ["tt0000007", "nm0000001", "nm0000001"],
    ["tt0000008", "nm0000002,nm0000003", "nm0000002"],
    ["tt0000009", "nm0000009", "nm0000009"],
    ["tt9999999", "nm0000002", "nm0000002"],
)

PRINCIPALS = tsv(
    ["tconst", "ordering", "nconst", "category", "job", "characters"],
    ["tt0000003", "1", "nm0000003", "actor", N, '["Hero"]'],
    ["tt0000003", "2", "nm0000004", "actress", N, '["Heroine"]'],
    ["tt0000004", "1", "nm0000003", "actor", N, N],
    ["tt0000004", "2", "nm0000099", "actor", N, N],
    ["tt0000005", "1", "nm0000003", "actor", N, N],
    ["tt0000005", "2", "nm0000004", "actress", N, N],
    ["tt0000005", "3", "nm0000004", "actress", N, N],
    ["tt9999999", "1", "nm0000003", "actor", N, N],
)

RATINGS = tsv(
    ["tconst", "averageRating", "numVotes"],
    ["tt0000001", "5.6", "1600"],
    ["tt0000003", "7.0", "100"],
    ["tt0000004", "9.0", "50"],
    ["tt0000005", "5.0", "10"],
    ["tt0000006", "9.9", "1000"],
    ["tt9999999", "8.0", "5"],
)

DATASET_TEXT = {
    "name.basics.tsv": NAMES,
    "title.basics.tsv": TITLES,
    "title.crew.tsv": CREW,
    "title.principals.tsv": PRINCIPALS,
    "title.ratings.tsv": RATINGS,
}


class InMemoryResourceLocator(ResourceLocator):
    """Serves dataset text from a dict; records the order of opens."""

    def __init__(self, files: Dict[str, str]):
        self.files = dict(files)
        self.opened = []

    def open(self, name: str):
        self.opened.append(name)
        if name not in self.files:
            raise ResourceNotFound(name, "memory")
        return io.StringIO(self.files[name])


@pytest.fixture(autouse=True)
def reset_filmindex_logger():
    """Undo setup_logging so caplog keeps working across tests."""
    yield
    logger = logging.getLogger("filmindex")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def loading_settings() -> LoadingConfig:
    return LoadingConfig(max_workers=4, show_progress=False, shutdown_grace_seconds=5.0)


@pytest.fixture
def dataset_files() -> Dict[str, str]:
    return dict(DATASET_TEXT)


@pytest.fixture
def locator(dataset_files) -> InMemoryResourceLocator:
    return InMemoryResourceLocator(dataset_files)


@pytest.fixture
def loaded_store(locator, loading_settings) -> EntityStore:
    """Store populated from the fixture datasets and frozen."""
    store = EntityStore()
    IngestionCoordinator(store, locator, loading_settings).run()
    return store


@pytest.fixture
def imdb_dir(tmp_path: Path) -> Path:
    """The fixture datasets written as .tsv files."""
    root = tmp_path / "imdb"
    root.mkdir()
    for name, text in DATASET_TEXT.items():
        (root / name).write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def cli_config() -> Config:
    return Config(
        loading=LoadingConfig(max_workers=4, show_progress=False),
        logging=LoggingConfig(log_file=None, console_output=False),
    )
