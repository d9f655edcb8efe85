"""
============================================================================
FILMINDEX - Entity Store
============================================================================
In-memory maps holding every loaded entity and the derived indexes.

🔗 MAPS:
    persons          nconst -> Person
    titles           tconst -> Title
    title_directors  tconst -> [nconst, ...]   (mirrors Title.directors)
    title_writers    tconst -> [nconst, ...]   (mirrors Title.writers)
    title_actors     tconst -> {nconst, ...}   (from title.principals.tsv; frozensets after freeze)

🔧 LIFECYCLE:
    1. Mutable while the ingestion coordinator runs its loaders
    2. freeze() once every load succeeded
    3. Read-only afterwards; any put/set/add raises StoreFrozenError

🔧 CONCURRENCY:
    Loaders for different datasets run on different threads at the same time.
    Each dataset owns a disjoint field group, so no two threads ever write the
    same field. Every mutation is a single dict/set operation, which CPython
    performs atomically; no lock is held across a file.
============================================================================
"""

import logging
from types import MappingProxyType
from typing import AbstractSet, Dict, FrozenSet, List, Mapping, Optional, Set

from filmindex.errors import StoreFrozenError
from filmindex.models import Person, Title


logger = logging.getLogger(__name__)


class EntityStore:
    """Persons, titles and the per-title crew/cast indexes."""

    def __init__(self):
        self._persons: Dict[str, Person] = {}
        self._titles: Dict[str, Title] = {}
        self._title_directors: Dict[str, List[str]] = {}
        self._title_writers: Dict[str, List[str]] = {}
        self._title_actors: Dict[str, Set[str]] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self):
        """Mark ingestion as finished; the store is read-only from now on."""
        self._title_actors = {tconst: frozenset(cast) for tconst, cast in self._title_actors.items()}
        self._frozen = True
        logger.info(
            "Store frozen: %s persons, %s titles, %s titles with cast",
            f"{len(self._persons):,}", f"{len(self._titles):,}", f"{len(self._title_actors):,}",
        )

    def _check_mutable(self):
        if self._frozen:
            raise StoreFrozenError("Entity store is frozen; ingestion already finished")

    # ------------------------------------------------------------------
    # Mutations (ingestion only)
    # ------------------------------------------------------------------

    def put_person(self, person: Person):
        """Insert or overwrite a person (last write wins)."""
        self._check_mutable()
        self._persons[person.nconst] = person

    def put_title_basic(self, title: Title):
        """Insert a title with all of its basic fields in one step."""
        self._check_mutable()
        self._titles[title.tconst] = title

    def set_title_crew(self, tconst: str, directors: List[str], writers: List[str]) -> bool:
        """
        Attach directors and writers to an existing title.

        Returns:
            False (and changes nothing) when the title is unknown
        """
        self._check_mutable()
        title = self._titles.get(tconst)
        if title is None:
            return False
        title.directors = directors
        title.writers = writers
        self._title_directors[tconst] = directors
        self._title_writers[tconst] = writers
        return True

    def add_title_cast(self, tconst: str, nconst: str) -> bool:
        """
        Add one person to a title's cast set.

        Returns:
            False when the title is unknown
        """
        self._check_mutable()
        if tconst not in self._titles:
            return False
        # setdefault is a single atomic dict operation
        self._title_actors.setdefault(tconst, set()).add(nconst)
        return True

    def set_title_rating(self, tconst: str, average_rating: Optional[float],
                         num_votes: Optional[int]) -> bool:
        """
        Attach rating fields to an existing title.

        Returns:
            False when the title is unknown
        """
        self._check_mutable()
        title = self._titles.get(tconst)
        if title is None:
            return False
        title.average_rating = average_rating
        title.num_votes = num_votes
        return True

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def persons(self) -> Mapping[str, Person]:
        return MappingProxyType(self._persons)

    @property
    def titles(self) -> Mapping[str, Title]:
        return MappingProxyType(self._titles)

    @property
    def title_directors(self) -> Mapping[str, List[str]]:
        return MappingProxyType(self._title_directors)

    @property
    def title_writers(self) -> Mapping[str, List[str]]:
        return MappingProxyType(self._title_writers)

    @property
    def title_actors(self) -> Mapping[str, AbstractSet[str]]:
        """Cast per title; frozensets once the store is frozen."""
        return MappingProxyType(self._title_actors)

    def get_person(self, nconst: str) -> Optional[Person]:
        return self._persons.get(nconst)

    def get_title(self, tconst: str) -> Optional[Title]:
        return self._titles.get(tconst)

    def has_person(self, nconst: str) -> bool:
        return nconst in self._persons

    def has_title(self, tconst: str) -> bool:
        return tconst in self._titles

    def cast_of(self, tconst: str) -> FrozenSet[str]:
        return frozenset(self._title_actors.get(tconst, ()))

    def counts(self) -> Dict[str, int]:
        return {
            'persons': len(self._persons),
            'titles': len(self._titles),
            'title_directors': len(self._title_directors),
            'title_writers': len(self._title_writers),
            'title_actors': len(self._title_actors),
        }
