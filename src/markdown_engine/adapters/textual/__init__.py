"""Textual host binding; the demo app lives in :mod:`.app`."""

from .controller import TextualHostHooks, TextualMarkdownAdapter
from .render import render_rich_text, style_for

__all__ = [
    "TextualHostHooks",
    "TextualMarkdownAdapter",
    "render_rich_text",
    "style_for",
]
