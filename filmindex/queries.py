"""
============================================================================
FILMINDEX - Query Engine
============================================================================
Read-only analytical queries over a frozen EntityStore.

🎬 QUERIES:
    1. titles_by_same_director_writer_alive()
       Exactly one director, exactly one writer, same person, still alive
    2. titles_by_two_actors(actor1, actor2)
       Titles whose cast contains both people
    3. best_titles_by_genre(genre)
       Per start year, the genre title with most votes (rating breaks ties)

🔧 ALIVE: a person counts as alive when they are in the person map and
   their death year is absent (\\N in name.basics.tsv). "Unknown" and
   "not deceased" are the same value in the source data.
============================================================================
"""

import logging
from typing import Dict, List

from filmindex.errors import StoreNotReadyError
from filmindex.models import Title
from filmindex.store import EntityStore


logger = logging.getLogger(__name__)


class QueryEngine:
    """Stateless queries; every call scans the in-memory maps."""

    def __init__(self, store: EntityStore):
        if not store.is_frozen:
            raise StoreNotReadyError("Entity store is not ready; ingestion has not completed")
        self.store = store

    def titles_by_same_director_writer_alive(self) -> List[Title]:
        """Titles directed and written by one and the same living person."""
        logger.info("Fetching titles by same director/writer and alive.")
        persons = self.store.persons
        results = []
        for title in self.store.titles.values():
            if len(title.directors) != 1 or len(title.writers) != 1:
                continue
            director = title.directors[0]
            if director != title.writers[0]:
                continue
            person = persons.get(director)
            if person is not None and person.is_alive:
                results.append(title)
        return results

    def titles_by_two_actors(self, actor1: str, actor2: str) -> List[Title]:
        """
        Titles in which both people appear.

        Unknown person ids give an empty list, not an error.
        """
        logger.info("Fetching titles where actors %s and %s both played.", actor1, actor2)
        if not (self.store.has_person(actor1) and self.store.has_person(actor2)):
            logger.warning("One or both actor IDs not found: %s, %s", actor1, actor2)
            return []

        titles = self.store.titles
        return [
            titles[tconst]
            for tconst, cast in self.store.title_actors.items()
            if actor1 in cast and actor2 in cast
        ]

    def best_titles_by_genre(self, genre: str) -> Dict[int, Title]:
        """
        Best title of each start year for one genre.

        Titles need a start year, votes and a rating (none of them zero).
        Most votes wins; equal votes fall back to the higher rating.
        Years without a qualifying title are absent from the result.
        """
        logger.info("Fetching best titles for genre: %s", genre)
        best: Dict[int, Title] = {}
        for title in self.store.titles.values():
            if genre not in title.genres:
                continue
            if not title.start_year or not title.num_votes or not title.average_rating:
                continue
            current = best.get(title.start_year)
            if current is None or _rank(title) > _rank(current):
                best[title.start_year] = title
        return dict(sorted(best.items()))


def _rank(title: Title):
    return (title.num_votes, title.average_rating)
