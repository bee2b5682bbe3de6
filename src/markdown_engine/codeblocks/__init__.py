"""Fenced code block detection and highlighter plug-in support."""

from .detector import (
    FENCED_BLOCK,
    CodeBlockDetector,
    CodeBlockRange,
    blocks_intersecting,
    offset_in_blocks,
)
from .highlight import (
    CodeHighlightAdapter,
    CodeHighlighter,
    DefaultHighlighter,
    HighlighterBinding,
)

__all__ = [
    "FENCED_BLOCK",
    "CodeBlockDetector",
    "CodeBlockRange",
    "CodeHighlightAdapter",
    "CodeHighlighter",
    "DefaultHighlighter",
    "HighlighterBinding",
    "blocks_intersecting",
    "offset_in_blocks",
]
