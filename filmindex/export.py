"""
Query result serialization.

Results are flattened into pandas DataFrames and written as JSON (records)
or CSV. List-valued columns are comma-joined for CSV, the same way IMDb
stores them.
"""

import logging
from dataclasses import fields
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd

from filmindex.models import Title


logger = logging.getLogger(__name__)

LIST_COLUMNS = ['genres', 'directors', 'writers']


def titles_to_frame(titles: Iterable[Title]) -> pd.DataFrame:
    """One row per title, columns in Title field order."""
    rows = [title.to_dict() for title in titles]
    if not rows:
        return pd.DataFrame(columns=[f.name for f in fields(Title)])
    return pd.DataFrame(rows)


def best_by_year_to_frame(best: Dict[int, Title]) -> pd.DataFrame:
    """Like titles_to_frame, with a leading 'year' column."""
    frame = titles_to_frame(best.values())
    frame.insert(0, 'year', list(best.keys()))
    return frame


def write_frame(frame: pd.DataFrame, path: Union[str, Path], export_format: str = 'json') -> Path:
    """
    Write a result frame to disk.

    Args:
        frame: Result rows
        path: Target file; the suffix is replaced by the format
        export_format: 'json' or 'csv'

    Returns:
        Path that was written
    """
    path = Path(path).with_suffix(f".{export_format}")
    path.parent.mkdir(parents=True, exist_ok=True)

    if export_format == 'json':
        frame.to_json(path, orient='records', indent=2)
    elif export_format == 'csv':
        flat = frame.copy()
        for column in LIST_COLUMNS:
            if column in flat.columns:
                flat[column] = flat[column].map(_join_list)
        flat.to_csv(path, index=False)
    else:
        raise ValueError(f"Unsupported export format: {export_format}")

    logger.info("Exported %d rows to %s", len(frame), path)
    return path


def resolve_export_path(path: Union[str, Path], exports_dir: Optional[Path] = None) -> Path:
    """Relative paths and bare names land under exports_dir; absolute paths are kept."""
    path = Path(path)
    if exports_dir is None or path.is_absolute():
        return path
    return Path(exports_dir) / path


def export_titles(titles: List[Title], path: Union[str, Path], export_format: str = 'json',
                  exports_dir: Optional[Path] = None) -> Path:
    return write_frame(titles_to_frame(titles), resolve_export_path(path, exports_dir), export_format)


def export_best_by_year(best: Dict[int, Title], path: Union[str, Path], export_format: str = 'json',
                        exports_dir: Optional[Path] = None) -> Path:
    return write_frame(best_by_year_to_frame(best), resolve_export_path(path, exports_dir), export_format)


def _join_list(value) -> str:
    if isinstance(value, (list, tuple)):
        return ','.join(value)
    return value
