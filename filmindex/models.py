r"""
============================================================================
FILMINDEX - Entity and Record Types
============================================================================
In-memory counterparts of the IMDb datasets.

📊 ENTITIES:
    - Person  - one row of name.basics.tsv, immutable once loaded
    - Title   - one row of title.basics.tsv, later enriched in place by
                title.crew.tsv (directors/writers) and title.ratings.tsv
                (average_rating/num_votes)

📊 ROW RECORDS (parsed but not stored as-is):
    - CrewRecord, PrincipalRecord, RatingRecord

🔧 NULL HANDLING: optional fields are None when the source holds \N or ''.
============================================================================
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True, slots=True)
class Person:
    """
    A person from name.basics.tsv.

    death_year is None when the person is alive or the year is unknown.
    """
    nconst: str
    primary_name: str
    birth_year: Optional[int] = None
    death_year: Optional[int] = None
    primary_profession: List[str] = field(default_factory=list)
    known_for_titles: List[str] = field(default_factory=list)

    @property
    def is_alive(self) -> bool:
        return self.death_year is None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Title:
    """
    A title from title.basics.tsv.

    Field groups and the only dataset allowed to write them:
        basics  -> tconst .. genres         (title.basics.tsv)
        crew    -> directors, writers       (title.crew.tsv)
        ratings -> average_rating, num_votes (title.ratings.tsv)
    """
    tconst: str
    title_type: Optional[str] = None
    primary_title: Optional[str] = None
    original_title: Optional[str] = None
    is_adult: bool = False
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    runtime_minutes: Optional[int] = None
    genres: List[str] = field(default_factory=list)
    directors: List[str] = field(default_factory=list)
    writers: List[str] = field(default_factory=list)
    average_rating: Optional[float] = None
    num_votes: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __repr__(self):
        return f"<Title(tconst='{self.tconst}', title='{self.primary_title}', year={self.start_year})>"


@dataclass(frozen=True, slots=True)
class CrewRecord:
    tconst: str
    directors: List[str]
    writers: List[str]


@dataclass(frozen=True, slots=True)
class PrincipalRecord:
    tconst: str
    nconst: str
    ordering: Optional[int] = None
    category: Optional[str] = None
    job: Optional[str] = None
    characters: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RatingRecord:
    tconst: str
    average_rating: Optional[float]
    num_votes: Optional[int]
