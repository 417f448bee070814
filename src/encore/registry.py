from pathlib import Path

from .exceptions import UnsupportedSourceError
from .sources.base import SongSource
from .sources.files import TextFileSource
from .sources.folder import FolderSource
from .sources.setlist import SetlistFileSource

_SOURCES: list[type[SongSource]] = [
    FolderSource,
    TextFileSource,
    SetlistFileSource,
]


def get_source(path: str | Path) -> SongSource:
    """Return an instantiated song source for the given path.

    Raises UnsupportedSourceError if no source matches.
    """
    path = Path(path)
    for cls in _SOURCES:
        if cls.can_handle(path):
            return cls()
    raise UnsupportedSourceError(str(path))
