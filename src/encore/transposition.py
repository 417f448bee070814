"""Chord and key transposition.

Rewrites the chord tokens embedded in a song's text by a number of semitones,
leaving every other character byte-identical.

Recognised tokens, most specific first:

  1. backtick chord        `[Am7]`
  2. bracketed chord       [Am7]
  3. backtick slash chord  `[C/G]`
  4. bracketed slash chord [C/G]
  5. bare chord in text    Am7, G/B   (only with ``match_bare_chords=True``)
  6. key metadata line     **Key:** D Major

All six rules are alternatives of one pattern scanned left to right, so a span
consumed by one rule is never seen by another.  This is what keeps a
backticked ``[D]`` from being transposed once as a backtick chord and again
as a bracketed chord.

A bracket followed by ``(`` is a link label (``[A](url)``) and is left alone.

Only the root note (and the bass note of a slash chord) changes; quality
suffixes, brackets, backticks and slashes are kept verbatim.  Notes are
spelled with sharps for upward transposition and flats for downward
transposition, in ASCII (``#``/``b``) unless the input note used ``♯``/``♭``.

The bare-chord rule is off by default: it also fires on prose such as the
article "A" in "A long time ago".  Pass ``match_bare_chords=True`` to enable
it.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto

MIN_OFFSET = -6
MAX_OFFSET = 6

SHARP = "♯"
FLAT = "♭"

NOTES_SHARP = ("C", "C♯", "D", "D♯", "E", "F", "F♯", "G", "G♯", "A", "A♯", "B")
NOTES_FLAT = ("C", "D♭", "D", "E♭", "E", "F", "G♭", "G", "A♭", "A", "B♭", "B")

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

_NOTE = r"[A-G](?:#|b|♯|♭)?"

# Longest spellings first so a bracketed "maj7" is not read as "maj" + "7".
_QUALITY = (
    r"(?:maj7|min7|dim7|aug7|sus7|sus2|sus4|add9|major|minor|maj|min|m7|dim|aug"
    r"|11|13|M|m|7|9)"
)

_ROOT_RE = re.compile(rf"^{_NOTE}")

# A bracket directly followed by "(" is a markdown link label, not a chord.
_BRACKET_PATTERNS = [
    # 1. `[Am7]`
    rf"`\[(?P<tick_root>{_NOTE})(?P<tick_quality>{_QUALITY})?\]`",
    # 2. [Am7]
    rf"\[(?P<bracket_root>{_NOTE})(?P<bracket_quality>{_QUALITY})?\](?!\()",
    # 3. `[C/G]`
    rf"`\[(?P<tick_slash_root>{_NOTE})(?P<tick_slash_quality>{_QUALITY})?"
    rf"/(?P<tick_slash_bass>{_NOTE})\]`",
    # 4. [C/G]
    rf"\[(?P<bracket_slash_root>{_NOTE})(?P<bracket_slash_quality>{_QUALITY})?"
    rf"/(?P<bracket_slash_bass>{_NOTE})\](?!\()",
]

# 5. Bare chords must stand alone: no word character, accidental, slash or
# bracket glued to either side.  Slash chords are tried first so "G/B" is
# one token.
_BARE_PATTERNS = [
    rf"(?<![\w#♯♭/\[])(?P<bare_slash_root>{_NOTE})(?P<bare_slash_quality>{_QUALITY})?"
    rf"/(?P<bare_slash_bass>{_NOTE})(?![\w#♯♭/\]])",
    rf"(?<![\w#♯♭/\[])(?P<bare_root>{_NOTE})(?P<bare_quality>{_QUALITY})?"
    r"(?![\w#♯♭/\]])",
]

# 6. **Key:** D Major
_KEY_PATTERN = rf"^\*\*Key:\*\*[ \t]+(?P<key_root>{_NOTE})(?P<key_mode>[ \t]+(?:Major|Minor))"

_TOKEN_RE = re.compile("|".join([*_BRACKET_PATTERNS, _KEY_PATTERN]), re.MULTILINE)
_TOKEN_WITH_BARE_RE = re.compile(
    "|".join([*_BRACKET_PATTERNS, *_BARE_PATTERNS, _KEY_PATTERN]), re.MULTILINE
)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class TokenForm(Enum):
    BACKTICK = auto()  # `[Am7]`, `[C/G]`
    BRACKETED = auto()  # [Am7], [C/G]
    PLAIN = auto()  # Am7 in running text
    KEY_LINE = auto()  # **Key:** D Major


@dataclass
class ChordToken:
    """A chord recognised in a song's text.

    ``start``/``end`` delimit the whole token including its delimiters.
    ``root_start``/``root_end`` and ``bass_start``/``bass_end`` delimit the
    note substrings that transposition rewrites.
    """

    form: TokenForm
    root: str
    quality: str
    bass: str | None
    start: int
    end: int
    root_start: int
    root_end: int
    bass_start: int | None = None
    bass_end: int | None = None

    @property
    def name(self) -> str:
        """Chord name without delimiters, e.g. ``Am7`` or ``C/G``."""
        bass = f"/{self.bass}" if self.bass else ""
        return f"{self.root}{self.quality}{bass}"


_FORMS = {
    "tick": TokenForm.BACKTICK,
    "bracket": TokenForm.BRACKETED,
    "tick_slash": TokenForm.BACKTICK,
    "bracket_slash": TokenForm.BRACKETED,
    "bare_slash": TokenForm.PLAIN,
    "bare": TokenForm.PLAIN,
    "key": TokenForm.KEY_LINE,
}


def _token_from_match(m: re.Match) -> ChordToken:
    # Every alternative has a "<prefix>_root" group; find which one matched.
    groups = m.groupdict()
    prefix = next(p for p in _FORMS if groups.get(f"{p}_root") is not None)
    quality = groups.get(f"{prefix}_quality") or ""
    bass_group = f"{prefix}_bass"
    has_bass = groups.get(bass_group) is not None
    return ChordToken(
        form=_FORMS[prefix],
        root=groups[f"{prefix}_root"],
        quality=quality,
        bass=groups[bass_group] if has_bass else None,
        start=m.start(),
        end=m.end(),
        root_start=m.start(f"{prefix}_root"),
        root_end=m.end(f"{prefix}_root"),
        bass_start=m.start(bass_group) if has_bass else None,
        bass_end=m.end(bass_group) if has_bass else None,
    )


def find_chords(text: str, match_bare_chords: bool = False) -> list[ChordToken]:
    """Return every chord token in *text*, left to right.

    Args:
        text:              Song text.
        match_bare_chords: Also recognise unbracketed chord names in running
                           text (may pick up prose words such as "A").

    Returns:
        Non-overlapping :class:`ChordToken` objects in text order.
    """
    pattern = _TOKEN_WITH_BARE_RE if match_bare_chords else _TOKEN_RE
    return [_token_from_match(m) for m in pattern.finditer(text)]


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


def _note_index(note: str) -> int:
    normalized = note.replace("#", SHARP).replace("b", FLAT)
    if normalized in NOTES_SHARP:
        return NOTES_SHARP.index(normalized)
    if normalized in NOTES_FLAT:
        return NOTES_FLAT.index(normalized)
    return -1


def transpose_note(note: str, semitones: int) -> str:
    """Transpose a single note name, e.g. ``transpose_note("F#", 1) == "G"``.

    Upward transposition spells the result with sharps, downward with flats.
    The result uses ASCII accidentals unless *note* was written with
    ``♯``/``♭``.  Notes outside both chromatic tables are returned unchanged.
    """
    index = _note_index(note)
    if index == -1:
        return note

    new_index = (index + semitones) % 12
    table = NOTES_SHARP if semitones >= 0 else NOTES_FLAT
    result = table[new_index]

    if SHARP in note or FLAT in note:
        return result
    return result.replace(SHARP, "#").replace(FLAT, "b")


def transpose_chord_name(chord: str, semitones: int) -> str:
    """Transpose the root of *chord*, keeping its suffix: ``Am7`` → ``Bm7``."""
    m = _ROOT_RE.match(chord)
    if not m:
        return chord
    return transpose_note(m.group(), semitones) + chord[m.end():]


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


class Transposer:
    """Transpose every chord token in a song's text."""

    def __init__(self, match_bare_chords: bool = False):
        self.match_bare_chords = match_bare_chords

    def transpose(self, text: str, semitones: int) -> str:
        """Return *text* with every recognised chord moved by *semitones*.

        ``semitones == 0`` returns *text* itself.
        """
        if semitones == 0:
            return text

        parts: list[str] = []
        pos = 0
        for token in find_chords(text, self.match_bare_chords):
            parts.append(text[pos:token.root_start])
            parts.append(transpose_note(token.root, semitones))
            pos = token.root_end
            if token.bass is not None:
                parts.append(text[pos:token.bass_start])
                parts.append(transpose_note(token.bass, semitones))
                pos = token.bass_end
        parts.append(text[pos:])
        return "".join(parts)


def transpose_text(text: str, semitones: int, match_bare_chords: bool = False) -> str:
    """Module-level shortcut for :meth:`Transposer.transpose`."""
    return Transposer(match_bare_chords).transpose(text, semitones)


# ---------------------------------------------------------------------------
# Offsets
# ---------------------------------------------------------------------------


def clamp_offset(semitones: int) -> int:
    """Limit a song's transposition to the range -6..+6."""
    return max(MIN_OFFSET, min(MAX_OFFSET, semitones))


def describe_offset(semitones: int) -> str:
    """Return a label for a transposition: ``Original``, ``+2 (♯♯)``, ``-1 (♭)``."""
    if semitones == 0:
        return "Original"
    if semitones > 0:
        return f"+{semitones} ({SHARP * semitones})"
    return f"{semitones} ({FLAT * abs(semitones)})"
