"""Engine options and colour palette."""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_engine.buffer import Font
from markdown_engine.runtime.telemetry import env_flag, env_value

DEFAULT_FONT_FAMILY = "sans-serif"
DEFAULT_CODE_FONT_FAMILY = "monospace"
HIDDEN_COLOR = "transparent"


@dataclass(frozen=True, slots=True)
class Theme:
    """Colours used by a style pass."""

    text: str = "#1f2328"
    muted: str = "#8c959f"
    quote: str = "#57606a"
    accent: str = "#0969da"
    code_background: str = "#f2f2f2"
    hidden: str = HIDDEN_COLOR


@dataclass(frozen=True, slots=True)
class Options:
    """Immutable configuration snapshot read by every pass."""

    note_font: Font = field(default_factory=lambda: Font(DEFAULT_FONT_FAMILY, 14.0))
    code_font: Font = field(
        default_factory=lambda: Font(DEFAULT_CODE_FONT_FAMILY, 13.0)
    )
    hide_syntax: bool = False
    inline_tags: bool = True
    theme: Theme = field(default_factory=Theme)

    @classmethod
    def from_env(cls) -> "Options":
        """Build options from ``MARKDOWN_ENGINE_*`` environment variables."""

        defaults = cls()
        note_font = Font(
            env_value("FONT_FAMILY") or defaults.note_font.family,
            _env_float("FONT_SIZE", defaults.note_font.size),
        )
        code_font = Font(
            env_value("CODE_FONT_FAMILY") or defaults.code_font.family,
            _env_float("CODE_FONT_SIZE", defaults.code_font.size),
        )
        return cls(
            note_font=note_font,
            code_font=code_font,
            hide_syntax=env_flag("HIDE_SYNTAX", defaults.hide_syntax),
            inline_tags=env_flag("INLINE_TAGS", defaults.inline_tags),
        )


def _env_float(name: str, fallback: float) -> float:
    value = env_value(name)
    if value is None:
        return fallback
    try:
        parsed = float(value)
    except ValueError:
        return fallback
    return parsed if parsed > 0 else fallback


__all__ = ["HIDDEN_COLOR", "Options", "Theme"]
