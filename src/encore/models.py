from dataclasses import dataclass, field
from typing import Any

from .exceptions import SetlistFormatError
from .transposition import clamp_offset

# Palette used to tell sets apart; new sets cycle through it.
SET_COLORS = (
    "blue",
    "green",
    "purple",
    "orange",
    "red",
    "teal",
    "pink",
    "indigo",
)


def set_color(index: int) -> str:
    """Return the palette color for the set at *index*."""
    return SET_COLORS[index % len(SET_COLORS)]


@dataclass
class SongDocument:
    """A ``(name, content)`` pair as supplied by a song source.

    Example: ``SongDocument("Wagon Wheel", "## Verse\\n`[G]`Headed down south")``
    """

    name: str
    content: str


@dataclass
class Song:
    """A song in the library or in a set.

    ``content`` is the stored text and is never rewritten by transposition or
    rendering; ``key_transposition`` is the song's own semitone offset.
    """

    id: int
    name: str
    content: str
    duration: int = 0
    key_transposition: int = 0  # clamped to [-6, +6]
    original_content: str | None = None
    is_modified: bool = False
    last_modified: str | None = None  # ISO timestamp of the last edit

    def __post_init__(self):
        self.key_transposition = clamp_offset(self.key_transposition)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "duration": self.duration,
            "keyTransposition": self.key_transposition,
            "isModified": self.is_modified,
        }
        if self.original_content is not None:
            data["originalContent"] = self.original_content
        if self.last_modified is not None:
            data["lastModified"] = self.last_modified
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Song":
        return cls(
            id=data["id"],
            name=str(data["name"]),
            content=str(data.get("content") or ""),
            duration=int(data.get("duration") or 0),
            key_transposition=int(data.get("keyTransposition") or 0),
            original_content=data.get("originalContent"),
            is_modified=bool(data.get("isModified", False)),
            last_modified=data.get("lastModified"),
        )


@dataclass
class SongSet:
    """An ordered set of songs (copies of library songs)."""

    id: int
    name: str
    songs: list[Song] = field(default_factory=list)
    color: str = "blue"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "songs": [song.to_dict() for song in self.songs],
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SongSet":
        return cls(
            id=data["id"],
            name=str(data["name"]),
            songs=[Song.from_dict(s) for s in data.get("songs") or []],
            color=str(data.get("color") or "blue"),
        )


@dataclass
class Setlist:
    """Complete application state: the song library plus its sets."""

    setlist_name: str = "My Setlist"
    all_songs: list[Song] = field(default_factory=list)
    sets: list[SongSet] = field(default_factory=lambda: [SongSet(id=1, name="Set 1")])
    current_set_index: int = 0
    current_song_index: int = -1  # -1 means no song selected
    font_size: int = 100  # percent, 50-200
    is_dark_mode: bool = False
    is_performance_mode: bool = False
    export_date: str | None = None

    @property
    def current_set(self) -> SongSet | None:
        if 0 <= self.current_set_index < len(self.sets):
            return self.sets[self.current_set_index]
        return None

    @property
    def current_song(self) -> Song | None:
        current = self.current_set
        if current is None:
            return None
        if 0 <= self.current_song_index < len(current.songs):
            return current.songs[self.current_song_index]
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "setlistName": self.setlist_name,
            "allSongs": [song.to_dict() for song in self.all_songs],
            "sets": [s.to_dict() for s in self.sets],
            "currentSetIndex": self.current_set_index,
            "currentSongIndex": self.current_song_index,
            "fontSize": self.font_size,
            "isDarkMode": self.is_dark_mode,
            "isPerformanceMode": self.is_performance_mode,
        }
        if self.export_date is not None:
            data["exportDate"] = self.export_date
        return data

    @classmethod
    def from_dict(cls, data: Any, source: str = "<data>") -> "Setlist":
        """Build a :class:`Setlist` from its JSON document.

        Raises :class:`~encore.exceptions.SetlistFormatError` if the document
        has no sets or a song/set entry is malformed.
        """
        if not isinstance(data, dict):
            raise SetlistFormatError(source, "setlist data is not an object")
        sets = data.get("sets")
        if not isinstance(sets, list) or not sets:
            raise SetlistFormatError(source, "setlist has no sets")
        try:
            return cls(
                setlist_name=str(data.get("setlistName") or "My Setlist"),
                all_songs=[Song.from_dict(s) for s in data.get("allSongs") or []],
                sets=[SongSet.from_dict(s) for s in sets],
                current_set_index=int(data.get("currentSetIndex") or 0),
                current_song_index=int(data.get("currentSongIndex", -1)),
                font_size=int(data.get("fontSize") or 100),
                is_dark_mode=bool(data.get("isDarkMode", False)),
                is_performance_mode=bool(data.get("isPerformanceMode", False)),
                export_date=data.get("exportDate"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise SetlistFormatError(source, f"malformed entry ({exc})") from exc
