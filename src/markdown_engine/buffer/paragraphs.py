"""Line/paragraph offset arithmetic over plain text."""

from __future__ import annotations

from .attributes import TextRange


def line_start(text: str, offset: int) -> int:
    offset = max(0, min(offset, len(text)))
    return text.rfind("\n", 0, offset) + 1


def line_end(text: str, offset: int) -> int:
    """Offset just past the newline terminating the line at ``offset``."""

    offset = max(0, min(offset, len(text)))
    newline = text.find("\n", offset)
    return len(text) if newline == -1 else newline + 1


def paragraph_range(text: str, span: TextRange) -> TextRange:
    """Expand ``span`` to whole lines, trailing newline included.

    A zero-length span selects the line containing its offset; an offset at
    the very end of text that finishes with a newline selects the empty final
    line.
    """

    start, end = span
    first = line_start(text, start)
    if end > start and text[end - 1 : end] == "\n":
        return (first, end)
    return (first, line_end(text, end))


def previous_line(text: str, span: TextRange) -> TextRange | None:
    """Line preceding the paragraph starting at ``span[0]``, if any."""

    start = span[0]
    if start == 0:
        return None
    return (line_start(text, start - 1), start)


def next_line(text: str, span: TextRange) -> TextRange | None:
    """Line following the paragraph ending at ``span[1]``, if any."""

    end = span[1]
    if end >= len(text) or text[end - 1 : end] != "\n":
        return None
    return (end, line_end(text, end))


__all__ = [
    "line_end",
    "line_start",
    "next_line",
    "paragraph_range",
    "previous_line",
]
