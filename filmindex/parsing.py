r"""
============================================================================
FILMINDEX - Record Parser
============================================================================
Stateless decoders turning one tokenized TSV row into a typed record.

🎯 CONTRACT (every parse_* function):
    - Row shorter than the schema minimum -> MalformedRecord
    - Numeric field that is not a number  -> FieldDecodeError
    - \N or '' in an optional field       -> None (lists -> [])
    - No I/O, no side effects

📊 SCHEMAS (minimum field count):
    name.basics.tsv        6  nconst, primaryName, birthYear, deathYear,
                              primaryProfession, knownForTitles
    title.basics.tsv       9  tconst, titleType, primaryTitle, originalTitle,
                              isAdult, startYear, endYear, runtimeMinutes, genres
    title.crew.tsv         3  tconst, directors, writers
    title.principals.tsv   3  tconst, ordering, nconst[, category, job, characters]
    title.ratings.tsv      3  tconst, averageRating, numVotes
============================================================================
"""

import csv
from typing import Callable, Iterator, List, Optional, Sequence, TextIO, Tuple

from filmindex.errors import FieldDecodeError, MalformedRecord, RecordError
from filmindex.models import CrewRecord, Person, PrincipalRecord, RatingRecord, Title


NULL_MARKER = r'\N'

PERSON_FIELDS = 6
TITLE_BASIC_FIELDS = 9
TITLE_CREW_FIELDS = 3
TITLE_PRINCIPAL_FIELDS = 3
TITLE_RATING_FIELDS = 3


# ============================================================================
# FIELD DECODING
# ============================================================================

def clean_value(value: Optional[str]) -> Optional[str]:
    r"""
    Clean IMDb TSV value, converting \N and '' to None.

    Args:
        value: Raw string value from TSV

    Returns:
        Stripped value or None
    """
    if value is None:
        return None
    value = value.strip()
    if value == NULL_MARKER or value == '':
        return None
    return value


def parse_boolean(value: str) -> bool:
    """IMDb booleans: '1' is true, anything else (including \\N) is false."""
    return clean_value(value) == '1'


def parse_list(value: str) -> List[str]:
    """Comma-joined multi-value field; never yields empty items."""
    cleaned = clean_value(value)
    if cleaned is None:
        return []
    return [item for item in cleaned.split(',') if item]


def parse_integer(row: Sequence[str], index: int, name: str, line_number: int) -> Optional[int]:
    r"""
    Decode an optional integer field.

    Raises:
        FieldDecodeError: field is neither \N/'' nor an integer
    """
    cleaned = clean_value(row[index])
    if cleaned is None:
        return None
    try:
        return int(cleaned)
    except ValueError:
        raise FieldDecodeError(line_number, name, index, row[index], row) from None


def parse_float(row: Sequence[str], index: int, name: str, line_number: int) -> Optional[float]:
    r"""
    Decode an optional float field.

    Raises:
        FieldDecodeError: field is neither \N/'' nor a number
    """
    cleaned = clean_value(row[index])
    if cleaned is None:
        return None
    try:
        return float(cleaned)
    except ValueError:
        raise FieldDecodeError(line_number, name, index, row[index], row) from None


def require_fields(row: Sequence[str], expected: int, line_number: int):
    """Raise MalformedRecord when the row is shorter than the schema."""
    if len(row) < expected:
        raise MalformedRecord(line_number, expected, len(row), row)


# ============================================================================
# SCHEMA PARSERS
# ============================================================================

def parse_person(row: Sequence[str], line_number: int) -> Person:
    """Decode one name.basics.tsv row."""
    require_fields(row, PERSON_FIELDS, line_number)
    return Person(
        nconst=row[0],
        primary_name=row[1],
        birth_year=parse_integer(row, 2, 'birthYear', line_number),
        death_year=parse_integer(row, 3, 'deathYear', line_number),
        primary_profession=parse_list(row[4]),
        known_for_titles=parse_list(row[5]),
    )


def parse_title_basic(row: Sequence[str], line_number: int) -> Title:
    """Decode one title.basics.tsv row. Crew and rating fields stay empty."""
    require_fields(row, TITLE_BASIC_FIELDS, line_number)
    return Title(
        tconst=row[0],
        title_type=clean_value(row[1]),
        primary_title=clean_value(row[2]),
        original_title=clean_value(row[3]),
        is_adult=parse_boolean(row[4]),
        start_year=parse_integer(row, 5, 'startYear', line_number),
        end_year=parse_integer(row, 6, 'endYear', line_number),
        runtime_minutes=parse_integer(row, 7, 'runtimeMinutes', line_number),
        genres=parse_list(row[8]),
    )


def parse_title_crew(row: Sequence[str], line_number: int) -> CrewRecord:
    """Decode one title.crew.tsv row."""
    require_fields(row, TITLE_CREW_FIELDS, line_number)
    return CrewRecord(
        tconst=row[0],
        directors=parse_list(row[1]),
        writers=parse_list(row[2]),
    )


def parse_title_principal(row: Sequence[str], line_number: int) -> PrincipalRecord:
    """Decode one title.principals.tsv row; trailing columns are optional."""
    require_fields(row, TITLE_PRINCIPAL_FIELDS, line_number)

    def optional(index: int) -> Optional[str]:
        return clean_value(row[index]) if len(row) > index else None

    return PrincipalRecord(
        tconst=row[0],
        ordering=parse_integer(row, 1, 'ordering', line_number),
        nconst=row[2],
        category=optional(3),
        job=optional(4),
        characters=optional(5),
    )


def parse_title_rating(row: Sequence[str], line_number: int) -> RatingRecord:
    """Decode one title.ratings.tsv row."""
    require_fields(row, TITLE_RATING_FIELDS, line_number)
    return RatingRecord(
        tconst=row[0],
        average_rating=parse_float(row, 1, 'averageRating', line_number),
        num_votes=parse_integer(row, 2, 'numVotes', line_number),
    )


# ============================================================================
# ROW STREAMING
# ============================================================================

def iter_rows(stream: TextIO,
              on_error: Optional[Callable[[RecordError], None]] = None) -> Iterator[Tuple[int, List[str]]]:
    """
    Yield (line_number, fields) for every data row, skipping the header.

    Line numbers are 1-based physical lines, so the first data row is line 2.
    Quotes are taken literally, as IMDb TSVs do not use CSV quoting.

    A line the csv module rejects (e.g. a field over csv.field_size_limit)
    is passed to ``on_error`` as a RecordError and reading continues with
    the next line. Without ``on_error`` the RecordError is raised.
    """
    reader = csv.reader(stream, delimiter='\t', quoting=csv.QUOTE_NONE)
    try:
        header = next(reader, None)
    except csv.Error:
        header = []
    if header is None:
        return
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            error = RecordError(f"line {reader.line_num}: {e}", reader.line_num, [])
            if on_error is None:
                raise error from e
            on_error(error)
            continue
        yield reader.line_num, row
