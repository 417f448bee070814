import json
from pathlib import Path

from click.testing import CliRunner

from encore.cli import main
from encore.sources.setlist import load_setlist

LIBRARY = Path(__file__).parent / "fixtures" / "library"
WAGON_WHEEL = str(LIBRARY / "Wagon Wheel.md")
FRIEND_OF_THE_DEVIL = str(LIBRARY / "Friend of the Devil.txt")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _invoke(tmp_path, args):
    """Run the CLI with a settings file that does not exist yet."""
    runner = CliRunner(env={"ENCORE_SETTINGS": str(tmp_path / "settings.json")})
    return runner.invoke(main, args)


# ---------------------------------------------------------------------------
# --help
# ---------------------------------------------------------------------------


def test_help_output():
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "Build, transpose and render setlists" in result.output
    for command in ("render", "transpose", "export", "settings"):
        assert command in result.output


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------


def test_render_to_file(tmp_path):
    out_file = tmp_path / "song.html"
    result = _invoke(tmp_path, ["render", WAGON_WHEEL, "-o", str(out_file)])
    assert result.exit_code == 0
    html = out_file.read_text(encoding="utf-8")
    assert 'data-section="chorus"' in html
    assert "<code>[A]</code>" in html
    assert "Written to" in result.output


def test_render_to_stdout(tmp_path):
    result = _invoke(tmp_path, ["render", WAGON_WHEEL])
    assert result.exit_code == 0
    assert '<h2 class="section-heading" data-section="intro"' in result.output


def test_render_transposed(tmp_path):
    out_file = tmp_path / "song.html"
    result = _invoke(tmp_path, ["render", WAGON_WHEEL, "-t", "2", "-o", str(out_file)])
    assert result.exit_code == 0
    html = out_file.read_text(encoding="utf-8")
    assert "B Major" in html
    assert "<code>[G#m]</code>" in html


def test_render_transpose_clamped(tmp_path):
    out_file = tmp_path / "song.html"
    _invoke(tmp_path, ["render", WAGON_WHEEL, "-t", "20", "-o", str(out_file)])
    # A + 6 = D#
    assert "D# Major" in out_file.read_text(encoding="utf-8")


def test_render_display_flags(tmp_path):
    out_file = tmp_path / "song.html"
    result = _invoke(
        tmp_path,
        [
            "render", WAGON_WHEEL, "--hide-chords", "--hide-key", "--bold-chorus",
            "--hide-harmony-high", "-o", str(out_file),
        ],
    )
    assert result.exit_code == 0
    html = out_file.read_text(encoding="utf-8")
    assert "<code>[" not in html
    assert "Key:" not in html
    assert "chorus-section" in html
    assert "harmony-high" not in html
    assert "Rock me mama" in html


def test_render_dark(tmp_path):
    out_file = tmp_path / "song.html"
    _invoke(tmp_path, ["render", WAGON_WHEEL, "--dark", "-o", str(out_file)])
    assert "color: #f8fafc" in out_file.read_text(encoding="utf-8")


def test_render_uses_settings_file(tmp_path):
    settings_file = tmp_path / "custom.json"
    settings_file.write_text(json.dumps({"light": {"show_chords": False}}), encoding="utf-8")
    out_file = tmp_path / "song.html"
    result = _invoke(
        tmp_path,
        ["render", WAGON_WHEEL, "--settings", str(settings_file), "-o", str(out_file)],
    )
    assert result.exit_code == 0
    assert "<code>[" not in out_file.read_text(encoding="utf-8")


def test_render_missing_file(tmp_path):
    result = _invoke(tmp_path, ["render", str(tmp_path / "missing.md")])
    assert result.exit_code == 2


def test_render_unreadable_file(tmp_path):
    path = tmp_path / "latin1.md"
    path.write_bytes("Café".encode("latin-1"))
    result = _invoke(tmp_path, ["render", str(path)])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "not valid UTF-8" in result.output


# ---------------------------------------------------------------------------
# transpose
# ---------------------------------------------------------------------------


def test_transpose_to_file(tmp_path):
    out_file = tmp_path / "song.txt"
    result = _invoke(tmp_path, ["transpose", FRIEND_OF_THE_DEVIL, "-2", "-o", str(out_file)])
    assert result.exit_code == 0
    text = out_file.read_text(encoding="utf-8")
    assert text.startswith("**Key:** F Major\n")
    assert "[Bb]trailed" in text
    assert "[F/A]around" in text


def test_transpose_to_stdout(tmp_path):
    result = _invoke(tmp_path, ["transpose", FRIEND_OF_THE_DEVIL, "2"])
    assert result.exit_code == 0
    assert "[A]Reno" in result.output
    assert "Transposing +2 (♯♯)" in result.output


def test_transpose_clamps(tmp_path):
    result = _invoke(tmp_path, ["transpose", FRIEND_OF_THE_DEVIL, "9"])
    assert result.exit_code == 0
    assert "Clamped 9 to 6" in result.output


def test_transpose_bare_chords(tmp_path):
    song = tmp_path / "bare.md"
    song.write_text("G  C  D\nGoing down the road", encoding="utf-8")
    out_file = tmp_path / "out.md"
    _invoke(tmp_path, ["transpose", str(song), "2", "--bare-chords", "-o", str(out_file)])
    assert out_file.read_text(encoding="utf-8") == "A  D  E\nGoing down the road"


def test_transpose_rejects_non_number(tmp_path):
    result = _invoke(tmp_path, ["transpose", FRIEND_OF_THE_DEVIL, "up"])
    assert result.exit_code == 2


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------


def test_export_song_files(tmp_path):
    out_file = tmp_path / "gig.html"
    result = _invoke(
        tmp_path,
        ["export", WAGON_WHEEL, FRIEND_OF_THE_DEVIL, "--name", "Friday Gig", "-o", str(out_file)],
    )
    assert result.exit_code == 0
    assert f"Written to {out_file}" in result.output
    state = load_setlist(out_file)
    assert state.setlist_name == "Friday Gig"
    assert [s.name for s in state.sets[0].songs] == ["Wagon Wheel", "Friend of the Devil"]
    assert [s.id for s in state.all_songs] == [1, 2]


def test_export_folder(tmp_path):
    out_file = tmp_path / "gig.html"
    result = _invoke(tmp_path, ["export", str(LIBRARY), "-o", str(out_file)])
    assert result.exit_code == 0
    state = load_setlist(out_file)
    assert [s.name for s in state.all_songs] == ["Friend of the Devil", "Wagon Wheel"]


def test_export_default_filename(tmp_path):
    runner = CliRunner(env={"ENCORE_SETTINGS": str(tmp_path / "settings.json")})
    with runner.isolated_filesystem(temp_dir=tmp_path) as cwd:
        result = runner.invoke(main, ["export", WAGON_WHEEL, "--name", "Friday Gig"])
        assert result.exit_code == 0
        assert (Path(cwd) / "Friday Gig_Setlist.html").exists()


def test_export_reexports_setlist(tmp_path):
    first = tmp_path / "first.html"
    second = tmp_path / "second.html"
    _invoke(tmp_path, ["export", WAGON_WHEEL, "--name", "Friday Gig", "-o", str(first)])
    result = _invoke(tmp_path, ["export", str(first), "--dark", "-o", str(second)])
    assert result.exit_code == 0
    state = load_setlist(second)
    assert state.setlist_name == "Friday Gig"
    assert state.is_dark_mode
    assert '<body class="dark"' in second.read_text(encoding="utf-8")


def test_export_unsupported_source(tmp_path):
    result = _invoke(tmp_path, ["export", str(LIBRARY / "gig-notes.pdf")])
    assert result.exit_code == 1
    assert "No song source found" in result.output


def test_export_broken_setlist(tmp_path):
    broken = tmp_path / "broken.html"
    broken.write_text("<html><body>nothing here</body></html>", encoding="utf-8")
    result = _invoke(tmp_path, ["export", str(broken)])
    assert result.exit_code == 1
    assert "no setlist data found" in result.output


# ---------------------------------------------------------------------------
# settings
# ---------------------------------------------------------------------------


def test_settings_shows_defaults(tmp_path):
    result = _invoke(tmp_path, ["settings"])
    assert result.exit_code == 0
    assert '"main_text_color": "#1e293b"' in result.output
    assert not (tmp_path / "settings.json").exists()


def test_settings_init_writes_file(tmp_path):
    result = _invoke(tmp_path, ["settings", "--init"])
    assert result.exit_code == 0
    data = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert data["dark"]["main_text_color"] == "#f8fafc"
