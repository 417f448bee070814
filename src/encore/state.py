"""Setlist state transitions.

Every change to a :class:`~encore.models.Setlist` is expressed as one of the
command dataclasses below and applied with :func:`reduce`, which returns a new
state and leaves its input untouched::

    state = reduce(state, AddSongs(documents))
    state = reduce(state, AddSongToCurrentSet(song_id=state.all_songs[0].id))
    state = reduce(state, TransposeSong(delta=2, index=0))

Commands that point at a set or song that does not exist are no-ops.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Union

from .models import Setlist, Song, SongDocument, SongSet, set_color
from .transposition import clamp_offset

MIN_FONT_SIZE = 50
MAX_FONT_SIZE = 200

# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AddSongs:
    documents: tuple[SongDocument, ...]


@dataclass(frozen=True)
class AddSongToCurrentSet:
    song_id: int


@dataclass(frozen=True)
class RemoveSongFromCurrentSet:
    index: int


@dataclass(frozen=True)
class ReorderSongs:
    from_index: int
    to_index: int


@dataclass(frozen=True)
class AddSet:
    pass


@dataclass(frozen=True)
class RemoveSet:
    index: int


@dataclass(frozen=True)
class SwitchToSet:
    index: int


@dataclass(frozen=True)
class RenameSet:
    index: int
    name: str


@dataclass(frozen=True)
class RenameSetlist:
    name: str


@dataclass(frozen=True)
class SelectSong:
    index: int


@dataclass(frozen=True)
class NavigateSong:
    direction: int  # -1 previous, +1 next


@dataclass(frozen=True)
class SetFontSize:
    size: int


@dataclass(frozen=True)
class ToggleDarkMode:
    pass


@dataclass(frozen=True)
class TogglePerformanceMode:
    pass


@dataclass(frozen=True)
class TransposeSong:
    delta: int
    index: int | None = None  # song in the current set; None = current song


@dataclass(frozen=True)
class ResetTransposition:
    index: int | None = None


@dataclass(frozen=True)
class UpdateSongContent:
    index: int
    content: str


@dataclass(frozen=True)
class LoadState:
    state: Setlist


Command = Union[
    AddSongs,
    AddSongToCurrentSet,
    RemoveSongFromCurrentSet,
    ReorderSongs,
    AddSet,
    RemoveSet,
    SwitchToSet,
    RenameSet,
    RenameSetlist,
    SelectSong,
    NavigateSong,
    SetFontSize,
    ToggleDarkMode,
    TogglePerformanceMode,
    TransposeSong,
    ResetTransposition,
    UpdateSongContent,
    LoadState,
]


def reduce(state: Setlist, command: Command) -> Setlist:
    """Apply *command* to *state* and return the new state.

    Raises TypeError for objects that are not one of the command types.
    """
    handler = _HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"Unknown setlist command: {command!r}")
    return handler(state, command)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _next_song_id(state: Setlist) -> int:
    ids = [song.id for song in state.all_songs]
    ids.extend(song.id for s in state.sets for song in s.songs)
    return int(max(ids, default=0)) + 1


def _replace_set(state: Setlist, index: int, song_set: SongSet, **changes) -> Setlist:
    sets = list(state.sets)
    sets[index] = song_set
    return replace(state, sets=sets, **changes)


def _update_song(state: Setlist, index: int | None, update: Callable[[Song], Song]) -> Setlist:
    current = state.current_set
    if index is None:
        index = state.current_song_index
    if current is None or not 0 <= index < len(current.songs):
        return state
    songs = list(current.songs)
    songs[index] = update(songs[index])
    return _replace_set(state, state.current_set_index, replace(current, songs=songs))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _add_songs(state: Setlist, cmd: AddSongs) -> Setlist:
    next_id = _next_song_id(state)
    new_songs = [
        Song(id=next_id + i, name=doc.name, content=doc.content, original_content=doc.content)
        for i, doc in enumerate(cmd.documents)
    ]
    return replace(state, all_songs=[*state.all_songs, *new_songs])


def _add_song_to_current_set(state: Setlist, cmd: AddSongToCurrentSet) -> Setlist:
    current = state.current_set
    song = next((s for s in state.all_songs if s.id == cmd.song_id), None)
    if current is None or song is None:
        return state
    # Sets hold copies so per-set edits and transpositions stay local.
    updated = replace(current, songs=[*current.songs, replace(song)])
    return _replace_set(state, state.current_set_index, updated)


def _remove_song_from_current_set(state: Setlist, cmd: RemoveSongFromCurrentSet) -> Setlist:
    current = state.current_set
    if current is None or not 0 <= cmd.index < len(current.songs):
        return state
    songs = [s for i, s in enumerate(current.songs) if i != cmd.index]

    selected = state.current_song_index
    if cmd.index == selected:
        selected = -1
    elif cmd.index < selected:
        selected -= 1

    return _replace_set(
        state, state.current_set_index, replace(current, songs=songs), current_song_index=selected
    )


def _reorder_songs(state: Setlist, cmd: ReorderSongs) -> Setlist:
    current = state.current_set
    if current is None:
        return state
    count = len(current.songs)
    if not (0 <= cmd.from_index < count and 0 <= cmd.to_index < count):
        return state

    songs = list(current.songs)
    moved = songs.pop(cmd.from_index)
    songs.insert(cmd.to_index, moved)

    # Keep the selected song selected.
    selected = state.current_song_index
    if cmd.from_index == selected:
        selected = cmd.to_index
    elif cmd.from_index < selected <= cmd.to_index:
        selected -= 1
    elif cmd.to_index <= selected < cmd.from_index:
        selected += 1

    return _replace_set(
        state, state.current_set_index, replace(current, songs=songs), current_song_index=selected
    )


def _add_set(state: Setlist, cmd: AddSet) -> Setlist:
    count = len(state.sets)
    next_id = int(max((s.id for s in state.sets), default=0)) + 1
    new_set = SongSet(id=next_id, name=f"Set {count + 1}", color=set_color(count))
    return replace(state, sets=[*state.sets, new_set])


def _remove_set(state: Setlist, cmd: RemoveSet) -> Setlist:
    if len(state.sets) <= 1 or not 0 <= cmd.index < len(state.sets):
        return state
    sets = [s for i, s in enumerate(state.sets) if i != cmd.index]

    current = state.current_set_index
    if cmd.index == current:
        current = max(0, cmd.index - 1)
    elif cmd.index < current:
        current -= 1

    return replace(state, sets=sets, current_set_index=current, current_song_index=-1)


def _switch_to_set(state: Setlist, cmd: SwitchToSet) -> Setlist:
    if not 0 <= cmd.index < len(state.sets):
        return state
    return replace(state, current_set_index=cmd.index, current_song_index=-1)


def _rename_set(state: Setlist, cmd: RenameSet) -> Setlist:
    if not 0 <= cmd.index < len(state.sets):
        return state
    return _replace_set(state, cmd.index, replace(state.sets[cmd.index], name=cmd.name))


def _rename_setlist(state: Setlist, cmd: RenameSetlist) -> Setlist:
    return replace(state, setlist_name=cmd.name)


def _select_song(state: Setlist, cmd: SelectSong) -> Setlist:
    # -1 clears the selection.
    current = state.current_set
    count = len(current.songs) if current is not None else 0
    if cmd.index != -1 and not 0 <= cmd.index < count:
        return state
    return replace(state, current_song_index=cmd.index)


def _navigate_song(state: Setlist, cmd: NavigateSong) -> Setlist:
    current = state.current_set
    if current is None or not current.songs:
        return state
    index = state.current_song_index + cmd.direction
    index = max(0, min(len(current.songs) - 1, index))
    return replace(state, current_song_index=index)


def _set_font_size(state: Setlist, cmd: SetFontSize) -> Setlist:
    return replace(state, font_size=max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, cmd.size)))


def _toggle_dark_mode(state: Setlist, cmd: ToggleDarkMode) -> Setlist:
    return replace(state, is_dark_mode=not state.is_dark_mode)


def _toggle_performance_mode(state: Setlist, cmd: TogglePerformanceMode) -> Setlist:
    entering = not state.is_performance_mode
    selected = state.current_song_index
    current = state.current_set
    # Entering performance mode starts on the first song if none is selected.
    if entering and current is not None and current.songs and selected == -1:
        selected = 0
    return replace(state, is_performance_mode=entering, current_song_index=selected)


def _transpose_song(state: Setlist, cmd: TransposeSong) -> Setlist:
    return _update_song(
        state,
        cmd.index,
        lambda song: replace(song, key_transposition=clamp_offset(song.key_transposition + cmd.delta)),
    )


def _reset_transposition(state: Setlist, cmd: ResetTransposition) -> Setlist:
    return _update_song(state, cmd.index, lambda song: replace(song, key_transposition=0))


def _update_song_content(state: Setlist, cmd: UpdateSongContent) -> Setlist:
    def edit(song: Song) -> Song:
        original = song.original_content if song.original_content is not None else song.content
        return replace(
            song,
            content=cmd.content,
            original_content=original,
            is_modified=cmd.content != original,
            last_modified=datetime.now(timezone.utc).isoformat(),
        )

    return _update_song(state, cmd.index, edit)


def _load_state(state: Setlist, cmd: LoadState) -> Setlist:
    return cmd.state


_HANDLERS: dict[type, Callable[[Setlist, Command], Setlist]] = {
    AddSongs: _add_songs,
    AddSongToCurrentSet: _add_song_to_current_set,
    RemoveSongFromCurrentSet: _remove_song_from_current_set,
    ReorderSongs: _reorder_songs,
    AddSet: _add_set,
    RemoveSet: _remove_set,
    SwitchToSet: _switch_to_set,
    RenameSet: _rename_set,
    RenameSetlist: _rename_setlist,
    SelectSong: _select_song,
    NavigateSong: _navigate_song,
    SetFontSize: _set_font_size,
    ToggleDarkMode: _toggle_dark_mode,
    TogglePerformanceMode: _toggle_performance_mode,
    TransposeSong: _transpose_song,
    ResetTransposition: _reset_transposition,
    UpdateSongContent: _update_song_content,
    LoadState: _load_state,
}
