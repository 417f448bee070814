"""Song text → display HTML.

Song texts are markdown-like, with a few additions for performers::

    **Key:** D Major

    ## Verse 1
    `[D]`Headed down south to the `[A]`land of the pines
    {harmony-high}ooh{/harmony-high}

    ## Chorus
    So `[D]`rock me mama

Stages run in a fixed order; later stages rely on the output of earlier ones.

+----+-----------------------------+----------------------------------------+
| #  | Stage                       | Controlled by                          |
+====+=============================+========================================+
| 1  | line endings → ``\\n``       |                                        |
| 2  | drop ``**Key:**`` line      | ``show_key``                           |
| 3  | color section headers       | ``<section>_color``                    |
| 4  | drop `` `[Chord]` `` tokens | ``show_chords``                        |
| 5  | bold the chorus body        | ``bold_chorus``                        |
| 6  | headings, bold/italic, code |                                        |
| 7  | harmony spans               | ``show_harmony_high/low``              |
| 8  | links                       |                                        |
| 9  | paragraphs and ``<br>``     | ``main_text_color``                    |
| 10 | cleanup                     |                                        |
+----+-----------------------------+----------------------------------------+

Rendering never raises.  Unbalanced markup (an unclosed harmony tag, a lone
``*``) is passed through literally.

Usage::

    from encore.markup import MarkupRenderer
    html = MarkupRenderer(settings).render(song.content)
"""

import html
import re

from .settings import SECTION_NAMES, DisplaySettings

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

_LINE_ENDING_RE = re.compile(r"\r\n?")

_KEY_LINE_RE = re.compile(r"^\*\*Key:\*\*.*(?:\n|$)", re.MULTILINE)

_SECTION_HEADER_RE = re.compile(
    r"^(#{1,3}) ((" + "|".join(SECTION_NAMES) + r")\b.*)$",
    re.MULTILINE | re.IGNORECASE,
)

_BACKTICK_CHORD_RE = re.compile(r"`\[[^\]`\n]*\]`")

# A line that opens a heading, either still in markdown or already converted.
_HEADING_LINE_RE = re.compile(r"^(?:#{1,3} |<h[1-6][ >])")

_HEADING_RES = [
    (3, re.compile(r"^### (.+)$", re.MULTILINE)),
    (2, re.compile(r"^## (.+)$", re.MULTILINE)),
    (1, re.compile(r"^# (.+)$", re.MULTILINE)),
]

# Bold before italic, in one left-to-right pass, so "***x***" is wrapped once.
# Italic around bold ("*a **b** c*") keeps its outer stars.
_EMPHASIS_RE = re.compile(r"\*\*([^*]+)\*\*|(?<!\*)\*([^*\n]+)\*(?!\*)")

_CODE_RE = re.compile(r"`([^`\n]+)`")

_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

_PARAGRAPH_BREAK_RE = re.compile(r"\n(?:[ \t]*\n)+")

# Lines that must not end up inside a <p>.
_BLOCK_LINE_RE = re.compile(r"^(?:<h[1-6][ >]|<div[ >]|</div>)")

_EMPTY_PARAGRAPH_RE = re.compile(r"<p[^>]*>(?:\s|<br>)*</p>")
_HEADING_IN_PARAGRAPH_RE = re.compile(r"<p[^>]*>(<h([1-6])[^>]*>.*?</h\2>)</p>")

_CHORUS_OPEN = '<div class="chorus-section" style="font-weight: bold">'
_CHORUS_CLOSE = "</div>"

# (tag, settings toggle); the legacy {harmony} tier has no toggle.
_HARMONY_TIERS = [
    ("harmony-high", "show_harmony_high"),
    ("harmony-low", "show_harmony_low"),
    ("harmony", None),
]


def _harmony_re(tag: str) -> re.Pattern:
    return re.compile(r"\{" + tag + r"\}([\s\S]*?)\{/" + tag + r"\}")


_HARMONY_RES = {tag: _harmony_re(tag) for tag, _ in _HARMONY_TIERS}

_HARMONY_CLASSES = {
    "harmony-high": "harmony-high",
    "harmony-low": "harmony-low",
    "harmony": "harmony-line",
}


class MarkupRenderer:
    """Render song text to HTML using one mode's :class:`DisplaySettings`."""

    def __init__(self, settings: DisplaySettings):
        self.settings = settings

    def render(self, text: str) -> str:
        """Return display HTML for *text*; empty input gives ``""``."""
        if not text:
            return ""

        s = self.settings
        text = _LINE_ENDING_RE.sub("\n", text)
        if not s.show_key:
            text = _KEY_LINE_RE.sub("", text)
        text = self._color_section_headers(text)
        if not s.show_chords:
            text = _BACKTICK_CHORD_RE.sub("", text)
        if s.bold_chorus:
            text = _wrap_chorus(text)
        text = _render_blocks(text)
        text = self._render_harmony(text)
        text = _LINK_RE.sub(_link, text)
        text = _assemble_paragraphs(text, s.main_text_color)
        return _cleanup(text)

    def _color_section_headers(self, text: str) -> str:
        def colored(m: re.Match) -> str:
            level = len(m.group(1))
            section = m.group(3).lower()
            color = self.settings.section_color(section)
            return (
                f'<h{level} class="section-heading" data-section="{section}" '
                f'style="color: {color}">{m.group(2)}</h{level}>'
            )

        return _SECTION_HEADER_RE.sub(colored, text)

    def _render_harmony(self, text: str) -> str:
        for tag, toggle in _HARMONY_TIERS:
            pattern = _HARMONY_RES[tag]
            if toggle is None or getattr(self.settings, toggle):
                css = _HARMONY_CLASSES[tag]
                text = pattern.sub(lambda m, css=css: _harmony_span(m.group(1), css), text)
            else:
                text = pattern.sub(lambda m: m.group(1), text)
        return text


def render_markup(text: str, settings: DisplaySettings) -> str:
    """Module-level shortcut for :meth:`MarkupRenderer.render`."""
    return MarkupRenderer(settings).render(text)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _wrap_chorus(text: str) -> str:
    """Wrap everything between a chorus header and the next header in a bold block."""
    out: list[str] = []
    in_chorus = False
    for line in text.split("\n"):
        if _HEADING_LINE_RE.match(line):
            if in_chorus:
                out.append(_CHORUS_CLOSE)
                in_chorus = False
            out.append(line)
            if 'data-section="chorus"' in line:
                out.append(_CHORUS_OPEN)
                in_chorus = True
            continue
        out.append(line)
    if in_chorus:
        out.append(_CHORUS_CLOSE)
    return "\n".join(out)


def _render_blocks(text: str) -> str:
    for level, pattern in _HEADING_RES:
        text = pattern.sub(rf'<h{level} class="song-heading">\1</h{level}>', text)
    text = _EMPHASIS_RE.sub(_emphasis, text)
    return _CODE_RE.sub(r"<code>\1</code>", text)


def _emphasis(m: re.Match) -> str:
    if m.group(1) is not None:
        return f"<strong>{m.group(1)}</strong>"
    return f"<em>{m.group(2)}</em>"


def _harmony_span(inner: str, css: str) -> str:
    """Wrap *inner* in a harmony span, closed and reopened at paragraph breaks."""
    open_tag = f'<span class="{css}">'
    inner = _PARAGRAPH_BREAK_RE.sub(lambda b: f"</span>{b.group()}{open_tag}", inner)
    return f"{open_tag}{inner}</span>"


def _link(m: re.Match) -> str:
    href = html.escape(m.group(2), quote=True)
    return f'<a href="{href}" target="_blank" rel="noopener noreferrer">{m.group(1)}</a>'


def _assemble_paragraphs(text: str, color: str) -> str:
    """Turn blank-line separated chunks into paragraphs, newlines into ``<br>``.

    Heading and block lines are emitted on their own, never inside a ``<p>``.
    """
    open_tag = f'<p style="color: {color}">'
    parts: list[str] = []

    for chunk in _PARAGRAPH_BREAK_RE.split(text):
        run: list[str] = []
        for line in chunk.split("\n"):
            if not line.strip():
                continue
            if _BLOCK_LINE_RE.match(line):
                if run:
                    parts.append(open_tag + "<br>".join(run) + "</p>")
                    run = []
                parts.append(line)
            else:
                run.append(line)
        if run:
            parts.append(open_tag + "<br>".join(run) + "</p>")

    return "".join(parts)


def _cleanup(text: str) -> str:
    text = _EMPTY_PARAGRAPH_RE.sub("", text)
    return _HEADING_IN_PARAGRAPH_RE.sub(r"\1", text)
