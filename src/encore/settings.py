"""Display settings for the song viewer.

Two independent :class:`DisplaySettings` records exist, one for light mode and
one for dark mode; the renderer is handed the one matching the current mode.
Settings are persisted as a JSON document::

    {
      "light": {"main_text_color": "#1e293b", "show_chords": true, ...},
      "dark":  {"main_text_color": "#f8fafc", "show_chords": true, ...}
    }

Unknown keys are ignored and missing keys fall back to the defaults, so older
or hand-edited files keep loading.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "ENCORE_SETTINGS"
DEFAULT_SETTINGS_PATH = Path("~/.config/encore/display-settings.json")

# Section names that can be color-coded, in display order.
SECTION_NAMES = (
    "intro",
    "verse",
    "chorus",
    "bridge",
    "outro",
    "solo",
    "interlude",
    "instrumental",
)


@dataclass
class DisplaySettings:
    # Text colors
    main_text_color: str = "#1e293b"

    # Section header colors
    intro_color: str = "#3B82F6"
    verse_color: str = "#F97316"
    chorus_color: str = "#EF4444"
    bridge_color: str = "#8B5CF6"
    outro_color: str = "#F59E0B"
    solo_color: str = "#10B981"
    interlude_color: str = "#06B6D4"
    instrumental_color: str = "#EC4899"

    # Display toggles
    show_chords: bool = True
    show_key: bool = True
    bold_chorus: bool = False
    show_harmony_high: bool = True
    show_harmony_low: bool = True

    def section_color(self, section: str) -> str | None:
        """Return the color for *section* (``"Verse"``, ``"chorus"``, …) or None."""
        name = section.strip().lower()
        if name not in SECTION_NAMES:
            return None
        return getattr(self, f"{name}_color")

    @classmethod
    def from_dict(cls, data: dict[str, Any], base: "DisplaySettings | None" = None) -> "DisplaySettings":
        """Overlay the known keys of *data* on *base* (default: light defaults)."""
        known = {f.name for f in fields(cls)}
        updates = {k: v for k, v in data.items() if k in known}
        return replace(base or cls(), **updates)


DEFAULT_LIGHT = DisplaySettings()

DEFAULT_DARK = DisplaySettings(
    main_text_color="#f8fafc",
    intro_color="#60A5FA",
    verse_color="#FB923C",
    chorus_color="#F87171",
    bridge_color="#A78BFA",
    outro_color="#FBBF24",
    solo_color="#34D399",
    interlude_color="#22D3EE",
    instrumental_color="#F472B6",
)


@dataclass
class DisplaySettingsState:
    light: DisplaySettings = field(default_factory=lambda: replace(DEFAULT_LIGHT))
    dark: DisplaySettings = field(default_factory=lambda: replace(DEFAULT_DARK))

    def current(self, is_dark_mode: bool) -> DisplaySettings:
        return self.dark if is_dark_mode else self.light

    def to_dict(self) -> dict[str, Any]:
        return {"light": asdict(self.light), "dark": asdict(self.dark)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DisplaySettingsState":
        light = data.get("light") or {}
        dark = data.get("dark") or {}
        return cls(
            light=DisplaySettings.from_dict(light, DEFAULT_LIGHT),
            dark=DisplaySettings.from_dict(dark, DEFAULT_DARK),
        )


def settings_path(path: str | os.PathLike | None = None) -> Path:
    """Resolve the settings file: explicit *path*, then ``$ENCORE_SETTINGS``, then the default."""
    if path is None:
        path = os.environ.get(SETTINGS_ENV_VAR) or DEFAULT_SETTINGS_PATH
    return Path(path).expanduser()


def load_display_settings(path: str | os.PathLike | None = None) -> DisplaySettingsState:
    """Load settings from *path*; fall back to the defaults if it is missing or unreadable."""
    resolved = settings_path(path)
    if not resolved.exists():
        logger.debug("No display settings at %s, using defaults", resolved)
        return DisplaySettingsState()
    try:
        data = json.loads(resolved.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("top-level value is not an object")
        return DisplaySettingsState.from_dict(data)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable display settings %s: %s", resolved, exc)
        return DisplaySettingsState()


def save_display_settings(state: DisplaySettingsState, path: str | os.PathLike | None = None) -> Path:
    """Write *state* as JSON and return the path written."""
    resolved = settings_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    resolved.write_text(json.dumps(state.to_dict(), indent=2) + "\n", encoding="utf-8")
    logger.debug("Saved display settings to %s", resolved)
    return resolved
