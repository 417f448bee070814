from abc import ABC, abstractmethod
from pathlib import Path

from ..models import SongDocument
from .utils import read_text_file


class SongSource(ABC):
    """Abstract base class for everything that supplies songs."""

    @classmethod
    @abstractmethod
    def can_handle(cls, path: Path) -> bool:
        """Return True if this source can load songs from the given path."""

    @abstractmethod
    def load(self, path: Path) -> list[SongDocument]:
        """Return the songs found at path.

        Song content is returned untouched: no transposition, no rendering.
        Raises LibraryError when the path cannot be read.
        """


class FileSongSource(SongSource):
    """A source backed by a single text file."""

    def read(self, path: Path) -> str:
        """Read the file at path as UTF-8.

        Raises LibraryError on filesystem-level failures.
        """
        return read_text_file(path)

    @abstractmethod
    def extract(self, raw: str, path: Path) -> list[SongDocument]:
        """Parse the file's text and return its songs."""

    def load(self, path: Path) -> list[SongDocument]:
        """Convenience method: read + extract."""
        raw = self.read(path)
        return self.extract(raw, path)
