"""Helpers shared by the file-based song sources."""

import re
from pathlib import Path

from ..exceptions import LibraryError

SONG_EXTENSIONS = (".md", ".txt")

_SONG_EXTENSION_RE = re.compile(r"\.(md|txt)$", re.IGNORECASE)


def is_song_file(path: Path) -> bool:
    """Return True for ``.md`` / ``.txt`` files (extension is case-insensitive)."""
    return path.suffix.lower() in SONG_EXTENSIONS


def song_name_from_filename(filename: str) -> str:
    """Strip the song extension: ``"Wagon Wheel.md"`` → ``"Wagon Wheel"``."""
    return _SONG_EXTENSION_RE.sub("", filename)


def read_text_file(path: Path) -> str:
    """Read *path* as UTF-8, raising :class:`LibraryError` on failure."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise LibraryError(str(path), "file is not valid UTF-8 text") from exc
    except OSError as exc:
        raise LibraryError(str(path), exc.strerror or str(exc)) from exc
