"""Font derivations used by header, emphasis and hidden-syntax styling."""

from __future__ import annotations

from markdown_engine.buffer import Font

HEADER_SCALES = {1: 2.0, 2: 1.7, 3: 1.4, 4: 1.2, 5: 1.1, 6: 1.05}

# Rendered size for hidden syntax markers: present in the text, unreadable.
HIDDEN_FONT_SIZE = 0.1


def header_font(base: Font, level: int) -> Font:
    scale = HEADER_SCALES.get(level, 1.0)
    return base.plain().with_traits(bold=True).with_size(base.size * scale)


def hidden_font(base: Font) -> Font:
    return Font(base.family, HIDDEN_FONT_SIZE)


def is_header_font(font: Font, base: Font) -> bool:
    return font.bold and font.size > base.size


__all__ = [
    "HEADER_SCALES",
    "HIDDEN_FONT_SIZE",
    "header_font",
    "hidden_font",
    "is_header_font",
]
