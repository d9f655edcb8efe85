"""
Filmindex - in-memory IMDb dataset index.

Loads name.basics, title.basics, title.crew, title.principals and
title.ratings into an EntityStore and answers queries over it.
"""

from filmindex.errors import (
    FieldDecodeError, FilmIndexError, IngestionAborted, MalformedRecord,
    ResourceNotFound, StoreFrozenError, StoreNotReadyError,
)
from filmindex.loader import IngestionCoordinator, IngestionReport
from filmindex.models import Person, Title
from filmindex.queries import QueryEngine
from filmindex.resources import DirectoryResourceLocator, ResourceLocator
from filmindex.store import EntityStore

__version__ = "0.1.0"
