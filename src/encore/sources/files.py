"""Source for individual song files (the "upload" path).

Each ``.md`` or ``.txt`` file is one song.  The song name is the file name
without its extension; the content is the file's text, unchanged.
"""

import logging
from pathlib import Path

from ..models import SongDocument
from .base import FileSongSource
from .utils import is_song_file, song_name_from_filename

logger = logging.getLogger(__name__)


class TextFileSource(FileSongSource):
    """Load one song from a markdown or plain-text file."""

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        return path.is_file() and is_song_file(path)

    def extract(self, raw: str, path: Path) -> list[SongDocument]:
        logger.debug("Loaded song file %s", path)
        return [SongDocument(name=song_name_from_filename(path.name), content=raw)]
