"""Source for setlists previously written by :mod:`encore.export`.

An exported setlist is a standalone HTML page whose full state is embedded as
JSON::

    <script type="application/json" id="setlist-data">{"setlistName": ...}</script>

Loading one yields every song of the library (``allSongs``) and, through
:func:`load_setlist`, the complete :class:`~encore.models.Setlist`.
"""

import json
import logging
from pathlib import Path

from bs4 import BeautifulSoup

from ..exceptions import SetlistFormatError
from ..models import Setlist, SongDocument
from .base import FileSongSource
from .utils import read_text_file

logger = logging.getLogger(__name__)

SETLIST_DATA_ID = "setlist-data"


def parse_setlist_html(html: str, source: str) -> Setlist:
    """Return the :class:`Setlist` embedded in an exported page.

    Raises :class:`~encore.exceptions.SetlistFormatError` if the data element
    is missing, its JSON cannot be decoded, or the state has no sets.
    """
    soup = BeautifulSoup(html, "html.parser")
    # The state is written last, after the rendered songs.
    tags = soup.find_all("script", id=SETLIST_DATA_ID)
    script_tag = tags[-1] if tags else None
    if not script_tag or not script_tag.string:
        raise SetlistFormatError(source, "no setlist data found in file")
    try:
        data = json.loads(script_tag.string)
    except json.JSONDecodeError as exc:
        raise SetlistFormatError(source, f"setlist data is not valid JSON ({exc.msg})") from exc
    return Setlist.from_dict(data, source=source)


def load_setlist(path: str | Path) -> Setlist:
    """Read an exported setlist file and return its state."""
    path = Path(path)
    setlist = parse_setlist_html(read_text_file(path), str(path))
    logger.debug("Loaded setlist %r from %s", setlist.setlist_name, path)
    return setlist


class SetlistFileSource(FileSongSource):
    """Load the song library stored in an exported setlist page."""

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        return path.is_file() and path.suffix.lower() in (".html", ".htm")

    def extract(self, raw: str, path: Path) -> list[SongDocument]:
        setlist = parse_setlist_html(raw, str(path))
        songs = setlist.all_songs or [song for s in setlist.sets for song in s.songs]
        return [SongDocument(name=song.name, content=song.content) for song in songs]
