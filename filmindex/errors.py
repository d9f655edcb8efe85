"""
Error taxonomy for ingestion and querying.

Recoverable per-row errors (``RecordError`` subclasses) are logged and the row
is skipped. ``ResourceNotFound`` is fatal for the dataset that needs the
resource, and ``IngestionAborted`` is what the coordinator raises to whoever
started the load.
"""

from typing import Dict, List, Optional, Sequence


class FilmIndexError(Exception):
    """Base class for all filmindex errors."""


class ResourceNotFound(FilmIndexError):
    """A named dataset could not be located."""

    def __init__(self, name: str, location: Optional[str] = None):
        self.name = name
        self.location = location
        where = f" in {location}" if location else ""
        super().__init__(f"Required data file not found: {name}{where}")


class RecordError(FilmIndexError):
    """A single row could not be turned into a record."""

    def __init__(self, message: str, line_number: int, raw: Sequence[str]):
        self.line_number = line_number
        self.raw = list(raw)
        super().__init__(message)

    @property
    def raw_line(self) -> str:
        return "\t".join(self.raw)


class MalformedRecord(RecordError):
    """Row has fewer fields than its schema requires."""

    def __init__(self, line_number: int, expected: int, actual: int, raw: Sequence[str]):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"line {line_number}: expected at least {expected} fields, got {actual}",
            line_number,
            raw,
        )


class FieldDecodeError(RecordError):
    """A numeric field holds text that is not a number."""

    def __init__(self, line_number: int, field_name: str, field_index: int,
                 text: str, raw: Sequence[str]):
        self.field_name = field_name
        self.field_index = field_index
        self.text = text
        super().__init__(
            f"line {line_number}: cannot decode {field_name} (field {field_index}) from '{text}'",
            line_number,
            raw,
        )


class IngestionAborted(FilmIndexError):
    """Ingestion failed; ``failures`` maps dataset name to its exception."""

    def __init__(self, message: str, failures: Optional[Dict[str, BaseException]] = None):
        self.failures = dict(failures or {})
        super().__init__(message)

    @property
    def datasets(self) -> List[str]:
        return list(self.failures)


class StoreFrozenError(FilmIndexError):
    """Mutation attempted on a store that is already serving reads."""


class StoreNotReadyError(FilmIndexError):
    """Queries requested before ingestion finished successfully."""
