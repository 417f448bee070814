"""Source for a folder of song files.

A :class:`FolderSession` is the capability to read one song folder.  Whoever
manages the library owns the session and passes it around; nothing else keeps
a reference to the folder.

Only the folder's own ``.md`` / ``.txt`` files are read (no recursion), in
name order.  A file that cannot be read is skipped with a warning so one bad
file does not abort the whole sync.
"""

import logging
from datetime import datetime
from pathlib import Path

from ..exceptions import LibraryError
from ..models import SongDocument
from .base import SongSource
from .utils import is_song_file, read_text_file, song_name_from_filename

logger = logging.getLogger(__name__)


class FolderSession:
    """A connection to one song folder."""

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self.is_connected = False
        self.last_sync_time: datetime | None = None

    @property
    def folder_name(self) -> str | None:
        return self.path.name if self.is_connected else None

    def connect(self) -> None:
        """Open the folder for syncing.

        Raises LibraryError if the path is not a readable directory.
        """
        if not self.path.is_dir():
            raise LibraryError(str(self.path), "not a directory")
        self.is_connected = True
        logger.debug("Connected song folder %s", self.path)

    def disconnect(self) -> None:
        self.is_connected = False
        logger.debug("Disconnected song folder %s", self.path)

    def sync(self) -> list[SongDocument]:
        """Read every song file in the folder.

        Raises LibraryError if the session is not connected, the folder has
        gone away, or its entries cannot be listed.
        """
        if not self.is_connected:
            raise LibraryError(str(self.path), "no folder connected")
        if not self.path.is_dir():
            self.is_connected = False
            raise LibraryError(str(self.path), "folder is no longer available - reconnect it")

        try:
            entries = sorted(self.path.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            raise LibraryError(
                str(self.path), f"failed to read folder contents: {exc.strerror or exc}"
            ) from exc

        songs: list[SongDocument] = []
        for entry in entries:
            if not (entry.is_file() and is_song_file(entry)):
                continue
            try:
                content = read_text_file(entry)
            except LibraryError as exc:
                logger.warning("Could not read file %s: %s", entry.name, exc.reason)
                continue
            songs.append(SongDocument(name=song_name_from_filename(entry.name), content=content))

        self.last_sync_time = datetime.now()
        logger.debug(
            "Sync complete: %d entries, %d song files in %s", len(entries), len(songs), self.path
        )
        return songs


class FolderSource(SongSource):
    """Load every song in a directory."""

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        return path.is_dir()

    def load(self, path: Path) -> list[SongDocument]:
        session = FolderSession(path)
        session.connect()
        return session.sync()
