"""
Named-resource lookup for the IMDb datasets.

The coordinator only asks for "a readable text stream for resource X"; where
the bytes come from is up to the locator. ``DirectoryResourceLocator`` reads
plain ``.tsv`` files and falls back to the gzipped ``.tsv.gz`` downloads.
"""

import gzip
import io
import logging
from pathlib import Path
from typing import TextIO, Union

from filmindex.errors import ResourceNotFound


logger = logging.getLogger(__name__)


class ResourceLocator:
    """Base class: ``open(name)`` returns a text stream or raises ResourceNotFound."""

    def open(self, name: str) -> TextIO:
        raise NotImplementedError

    def describe(self) -> str:
        return type(self).__name__


class DirectoryResourceLocator(ResourceLocator):
    """Resolves dataset names against one directory."""

    def __init__(self, base_dir: Union[str, Path], encoding: str = 'utf-8'):
        self.base_dir = Path(base_dir)
        self.encoding = encoding

    def resolve(self, name: str) -> Path:
        """Path of the dataset, preferring the extracted file over the .gz."""
        plain = self.base_dir / name
        if plain.is_file():
            return plain
        gzipped = self.base_dir / f"{name}.gz"
        if gzipped.is_file():
            return gzipped
        logger.error("'%s' not found in %s", name, self.base_dir)
        raise ResourceNotFound(name, str(self.base_dir))

    def open(self, name: str) -> TextIO:
        path = self.resolve(name)
        logger.debug("Opening %s", path)
        # Undecodable bytes decode to U+FFFD; the row still goes through the parser
        if path.suffix == '.gz':
            return io.TextIOWrapper(gzip.open(path, 'rb'), encoding=self.encoding,
                                    errors='replace', newline='')
        return open(path, 'r', encoding=self.encoding, errors='replace', newline='')

    def describe(self) -> str:
        return str(self.base_dir)
