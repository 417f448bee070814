"""Standalone HTML export of a setlist.

The exported page needs nothing else to display: every song is transposed by
its own offset, rendered with the active mode's display settings and embedded
as HTML.  The complete state is embedded too, as JSON in
``<script id="setlist-data">``, so the page can be loaded back with
:func:`encore.sources.setlist.load_setlist`.
"""

import html
import json
import logging
import re
from dataclasses import replace
from datetime import datetime, timezone

from .markup import render_markup
from .models import Setlist, Song
from .settings import DisplaySettings, DisplaySettingsState
from .sources.setlist import SETLIST_DATA_ID
from .transposition import describe_offset, transpose_text

logger = logging.getLogger(__name__)

_STYLESHEET = """
body { font-family: system-ui, sans-serif; margin: 2rem; font-size: var(--font-scale, 1em); }
body.dark { background: #0f172a; }
.set { margin-bottom: 3rem; }
.song { margin-bottom: 2rem; }
.song-meta { font-size: 0.8em; opacity: 0.7; }
code { font-family: ui-monospace, monospace; font-weight: 600; }
.harmony-high { font-style: italic; background: rgba(59, 130, 246, 0.15); }
.harmony-low { font-style: italic; background: rgba(16, 185, 129, 0.15); }
.harmony-line { font-style: italic; background: rgba(139, 92, 246, 0.15); }
""".strip()


def render_song(song: Song, settings: DisplaySettings, match_bare_chords: bool = False) -> str:
    """Transpose *song* by its own offset, then render it."""
    text = transpose_text(song.content, song.key_transposition, match_bare_chords)
    return render_markup(text, settings)


def export_filename(setlist_name: str) -> str:
    """Return the download name for a setlist: ``"Friday Gig"`` → ``"Friday Gig_Setlist.html"``."""
    return re.sub(r"[^\w\s]", "_", setlist_name) + "_Setlist.html"


def export_setlist(
    state: Setlist,
    settings_state: DisplaySettingsState,
    match_bare_chords: bool = False,
) -> str:
    """Return a standalone HTML page for *state*."""
    exported = replace(state, export_date=datetime.now(timezone.utc).isoformat())
    settings = settings_state.current(exported.is_dark_mode)

    parts: list[str] = []
    for song_set in exported.sets:
        parts.append(f'<section class="set set-{html.escape(song_set.color)}">')
        parts.append(f"<h1>{html.escape(song_set.name)}</h1>")
        for song in song_set.songs:
            parts.append(_render_song_block(song, settings, match_bare_chords))
        parts.append("</section>")
    logger.debug("Exported %d set(s) of %r", len(exported.sets), exported.setlist_name)

    # "</" inside the payload would close the script element early.
    payload = json.dumps(exported.to_dict()).replace("</", "<\\/")
    title = html.escape(exported.setlist_name)
    body_class = ' class="dark"' if exported.is_dark_mode else ""
    font_scale = exported.font_size / 100

    return "\n".join(
        [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="utf-8">',
            '<meta name="viewport" content="width=device-width, initial-scale=1">',
            f"<title>{title}</title>",
            f"<style>{_STYLESHEET}</style>",
            "</head>",
            f'<body{body_class} style="--font-scale: {font_scale}em">',
            f"<header><h1>{title}</h1></header>",
            *parts,
            f'<script type="application/json" id="{SETLIST_DATA_ID}">{payload}</script>',
            "</body>",
            "</html>",
        ]
    ) + "\n"


def _render_song_block(song: Song, settings: DisplaySettings, match_bare_chords: bool) -> str:
    meta = ""
    if song.key_transposition:
        meta = f'<div class="song-meta">Key: {describe_offset(song.key_transposition)}</div>'
    return (
        '<article class="song">'
        f"<h2>{html.escape(song.name)}</h2>"
        f"{meta}"
        f"{render_song(song, settings, match_bare_chords)}"
        "</article>"
    )
