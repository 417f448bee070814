import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import NoReturn

import click

from .exceptions import EncoreError
from .export import export_filename, export_setlist
from .markup import render_markup
from .models import Setlist
from .registry import get_source
from .settings import (
    SETTINGS_ENV_VAR,
    DisplaySettingsState,
    load_display_settings,
    save_display_settings,
    settings_path,
)
from .sources.files import TextFileSource
from .sources.setlist import SetlistFileSource, load_setlist
from .state import AddSongs, AddSongToCurrentSet, reduce
from .transposition import clamp_offset, describe_offset, transpose_text

_settings_option = click.option(
    "--settings",
    "settings_file",
    default=None,
    envvar=SETTINGS_ENV_VAR,
    metavar="FILE",
    help="Display settings JSON (default: ~/.config/encore/display-settings.json).",
)

_bare_chords_option = click.option(
    "--bare-chords/--no-bare-chords",
    default=False,
    show_default=True,
    help="Also transpose unbracketed chord names in running text.",
)

_output_option = click.option(
    "-o", "--output", "output_path", default=None, metavar="PATH",
    help="Write to PATH instead of stdout.",
)


def _fail(exc: Exception) -> NoReturn:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


def _write_output(text: str, output_path: str | None) -> None:
    if output_path is None:
        click.echo(text, nl=False)
        return
    dest = Path(output_path)
    dest.write_text(text, encoding="utf-8")
    click.echo(f"Written to {dest}", err=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """Build, transpose and render setlists of song charts.

    \b
    Song files are markdown with chords written as `[Am7]`, [Am7] or [C/G],
    section headers such as "## Chorus" and a "**Key:** D Major" line.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("-t", "--transpose", "semitones", default=0, show_default=True,
              help="Semitones to transpose by (clamped to -6..+6).")
@click.option("--dark", is_flag=True, default=False, help="Use the dark-mode settings.")
@click.option("--hide-chords", is_flag=True, default=False, help="Remove `[Chord]` tokens.")
@click.option("--hide-key", is_flag=True, default=False, help="Remove the **Key:** line.")
@click.option("--bold-chorus", is_flag=True, default=False, help="Render chorus text in bold.")
@click.option("--hide-harmony-high", is_flag=True, default=False,
              help="Show {harmony-high} text without highlighting.")
@click.option("--hide-harmony-low", is_flag=True, default=False,
              help="Show {harmony-low} text without highlighting.")
@_bare_chords_option
@_settings_option
@_output_option
def render(
    path: str,
    semitones: int,
    dark: bool,
    hide_chords: bool,
    hide_key: bool,
    bold_chorus: bool,
    hide_harmony_high: bool,
    hide_harmony_low: bool,
    bare_chords: bool,
    settings_file: str | None,
    output_path: str | None,
) -> None:
    """Render a song file to HTML."""
    try:
        text = TextFileSource().read(Path(path))
    except EncoreError as exc:
        _fail(exc)

    settings = load_display_settings(settings_file).current(dark)
    overrides: dict[str, bool] = {}
    if hide_chords:
        overrides["show_chords"] = False
    if hide_key:
        overrides["show_key"] = False
    if bold_chorus:
        overrides["bold_chorus"] = True
    if hide_harmony_high:
        overrides["show_harmony_high"] = False
    if hide_harmony_low:
        overrides["show_harmony_low"] = False
    settings = replace(settings, **overrides)

    transposed = transpose_text(text, clamp_offset(semitones), bare_chords)
    _write_output(render_markup(transposed, settings) + "\n", output_path)


@main.command(context_settings={"ignore_unknown_options": True})
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("semitones", type=int)
@_bare_chords_option
@_output_option
def transpose(path: str, semitones: int, bare_chords: bool, output_path: str | None) -> None:
    """Transpose the chords of a song file by SEMITONES (-6..+6)."""
    try:
        text = TextFileSource().read(Path(path))
    except EncoreError as exc:
        _fail(exc)

    offset = clamp_offset(semitones)
    if offset != semitones:
        click.echo(f"Clamped {semitones} to {offset}", err=True)
    click.echo(f"Transposing {describe_offset(offset)}", err=True)
    _write_output(transpose_text(text, offset, bare_chords), output_path)


@main.command()
@click.argument("sources", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("--name", default="My Setlist", show_default=True, help="Setlist name.")
@click.option("--dark", is_flag=True, default=False, help="Export in dark mode.")
@_bare_chords_option
@_settings_option
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Output file path (default: <name>_Setlist.html)")
def export(
    sources: tuple[str, ...],
    name: str,
    dark: bool,
    bare_chords: bool,
    settings_file: str | None,
    output_path: str | None,
) -> None:
    """Export songs as a standalone HTML setlist.

    \b
    SOURCES may be song files (.md, .txt), song folders, or a single
    previously exported setlist (.html), which is re-exported as is.
    """
    try:
        if len(sources) == 1 and SetlistFileSource.can_handle(Path(sources[0])):
            state = load_setlist(sources[0])
        else:
            state = _build_setlist(sources, name)
    except EncoreError as exc:
        _fail(exc)

    if dark:
        state = replace(state, is_dark_mode=True)

    html = export_setlist(state, load_display_settings(settings_file), bare_chords)
    dest = Path(output_path) if output_path else Path(export_filename(state.setlist_name))
    dest.write_text(html, encoding="utf-8")
    click.echo(f"Written to {dest}")


def _build_setlist(sources: tuple[str, ...], name: str) -> Setlist:
    """Load every source into the library and put all songs in the first set."""
    documents = []
    for source in sources:
        documents.extend(get_source(source).load(Path(source)))

    state = reduce(Setlist(setlist_name=name), AddSongs(tuple(documents)))
    for song in state.all_songs:
        state = reduce(state, AddSongToCurrentSet(song_id=song.id))
    return state


@main.command()
@click.option("--init", is_flag=True, default=False,
              help="Write the default settings to the settings file.")
@_settings_option
def settings(init: bool, settings_file: str | None) -> None:
    """Show the display settings in effect."""
    if init:
        state = DisplaySettingsState()
        dest = save_display_settings(state, settings_file)
        click.echo(f"Written to {dest}", err=True)
    else:
        state = load_display_settings(settings_file)
        click.echo(f"# {settings_path(settings_file)}", err=True)
    click.echo(json.dumps(state.to_dict(), indent=2))
