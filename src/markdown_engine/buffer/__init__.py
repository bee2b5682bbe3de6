"""Styled text buffer, attribute model and host boundary types."""

from .attributes import (
    ALL_KINDS,
    AttributeKind,
    Font,
    StyleRange,
    TextRange,
    clamp_range,
    intersection,
    intersects,
)
from .buffer import ContentLengthError, StyledBuffer, Transaction
from .paragraphs import paragraph_range
from .sync import (
    BufferEdit,
    BufferListener,
    BufferMirror,
    BufferRangeError,
    EditMask,
    StyledRun,
)

__all__ = [
    "ALL_KINDS",
    "AttributeKind",
    "BufferEdit",
    "BufferListener",
    "BufferMirror",
    "BufferRangeError",
    "ContentLengthError",
    "EditMask",
    "Font",
    "StyleRange",
    "StyledBuffer",
    "StyledRun",
    "TextRange",
    "Transaction",
    "clamp_range",
    "intersection",
    "intersects",
    "paragraph_range",
]
