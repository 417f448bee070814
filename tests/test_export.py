from dataclasses import replace

from bs4 import BeautifulSoup

from encore.export import export_filename, export_setlist, render_song
from encore.models import Setlist, Song, SongSet
from encore.settings import DisplaySettings, DisplaySettingsState
from encore.sources.setlist import parse_setlist_html

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _song(song_id=1, name="Wagon Wheel", key_transposition=0, content=None) -> Song:
    content = content or "**Key:** A Major\n## Chorus\nSo `[A]`rock me mama"
    return Song(
        id=song_id,
        name=name,
        content=content,
        key_transposition=key_transposition,
        original_content=content,
    )


def _state(**kwargs) -> Setlist:
    songs = [_song(), _song(2, "Jolene", -2, "`[C#m]`Jolene")]
    fields = {
        "setlist_name": "Friday Gig",
        "all_songs": songs,
        "sets": [
            SongSet(id=1, name="Set 1", songs=[replace(s) for s in songs]),
            SongSet(id=2, name="Encore", color="green"),
        ],
    }
    fields.update(kwargs)
    return Setlist(**fields)


# ---------------------------------------------------------------------------
# render_song
# ---------------------------------------------------------------------------


def test_render_song_applies_transposition():
    out = render_song(_song(key_transposition=2), DisplaySettings())
    assert "B Major" in out
    assert "<code>[B]</code>" in out


def test_render_song_does_not_touch_content():
    song = _song(key_transposition=2)
    render_song(song, DisplaySettings())
    assert "`[A]`" in song.content


def test_render_song_out_of_range_offset_clamped():
    assert render_song(_song(key_transposition=9), DisplaySettings()) == render_song(
        _song(key_transposition=6), DisplaySettings()
    )


def test_render_song_bare_chords():
    song = _song(content="A  D  E", key_transposition=2)
    assert "B  E  F#" in render_song(song, DisplaySettings(), match_bare_chords=True)
    assert "A  D  E" in render_song(song, DisplaySettings())


# ---------------------------------------------------------------------------
# export_filename
# ---------------------------------------------------------------------------


def test_export_filename():
    assert export_filename("Friday Gig") == "Friday Gig_Setlist.html"
    assert export_filename("Rock & Roll / Live!") == "Rock _ Roll _ Live__Setlist.html"


# ---------------------------------------------------------------------------
# export_setlist
# ---------------------------------------------------------------------------


def test_export_contains_sets_and_songs():
    page = export_setlist(_state(), DisplaySettingsState())
    soup = BeautifulSoup(page, "html.parser")
    assert soup.title.string == "Friday Gig"
    sections = soup.find_all("section")
    assert [s.h1.string for s in sections] == ["Set 1", "Encore"]
    assert "set-green" in sections[1]["class"]
    assert [a.h2.string for a in soup.find_all("article")] == ["Wagon Wheel", "Jolene"]


def test_export_transposes_each_song_by_its_offset():
    page = export_setlist(_state(), DisplaySettingsState())
    assert "<code>[Bm]</code>Jolene" in page
    assert '<div class="song-meta">Key: -2 (♭♭)</div>' in page
    # the untransposed song gets no key note
    assert page.count('class="song-meta"') == 1


def test_export_uses_mode_settings():
    settings = DisplaySettingsState()
    settings.dark.show_chords = False
    light_page = export_setlist(_state(), settings)
    dark_page = export_setlist(_state(is_dark_mode=True), settings)
    assert "<code>[A]</code>" in light_page
    assert "<code>[A]</code>" not in dark_page
    assert '<body class="dark"' in dark_page
    assert "color: #f8fafc" in dark_page


def test_export_font_scale():
    page = export_setlist(_state(font_size=150), DisplaySettingsState())
    assert "--font-scale: 1.5em" in page


def test_export_escapes_names():
    page = export_setlist(_state(setlist_name="Rock & <Roll>"), DisplaySettingsState())
    assert "<title>Rock &amp; &lt;Roll&gt;</title>" in page


def test_export_embeds_state_that_loads_back():
    state = _state()
    page = export_setlist(state, DisplaySettingsState())
    loaded = parse_setlist_html(page, "export")
    assert loaded.export_date is not None
    assert replace(loaded, export_date=None) == state


def test_export_embedded_state_survives_script_tags_in_songs():
    song = _song(content='Watch out </script><script id="setlist-data">{}</script>')
    state = _state(all_songs=[song], sets=[SongSet(id=1, name="Set 1", songs=[song])])
    page = export_setlist(state, DisplaySettingsState())
    loaded = parse_setlist_html(page, "export")
    assert loaded.all_songs[0].content == song.content


def test_export_does_not_modify_state():
    state = _state()
    export_setlist(state, DisplaySettingsState())
    assert state.export_date is None
