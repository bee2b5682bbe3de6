"""Style Applicator and the font/link helpers it relies on."""

from .applicator import StyleApplicator
from .fonts import HEADER_SCALES, HIDDEN_FONT_SIZE, header_font, hidden_font
from .links import TAG_SCHEME, resolve_link_target, tag_link, trim_autolink

__all__ = [
    "HEADER_SCALES",
    "HIDDEN_FONT_SIZE",
    "StyleApplicator",
    "TAG_SCHEME",
    "header_font",
    "hidden_font",
    "resolve_link_target",
    "tag_link",
    "trim_autolink",
]
