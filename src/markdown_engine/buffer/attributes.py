"""Attribute kinds, font descriptors and offset-range helpers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

TextRange = Tuple[int, int]  # half-open (start, end)


class AttributeKind(str, Enum):
    """Named attribute layers carried by every buffer offset."""

    FONT = "font"
    FOREGROUND = "foreground"
    BACKGROUND = "background"
    LINK = "link"
    STRIKETHROUGH = "strikethrough"
    HIDDEN = "hidden"


ALL_KINDS: tuple[AttributeKind, ...] = tuple(AttributeKind)

Attributes = Mapping[AttributeKind, Any]


@dataclass(frozen=True, slots=True)
class Font:
    """Immutable font descriptor: family, point size and symbolic traits."""

    family: str
    size: float
    bold: bool = False
    italic: bool = False

    def __post_init__(self) -> None:
        if not self.family:
            raise ValueError("font family cannot be empty")
        if self.size <= 0:
            raise ValueError("font size must be positive")

    def with_traits(
        self, *, bold: Optional[bool] = None, italic: Optional[bool] = None
    ) -> "Font":
        return replace(
            self,
            bold=self.bold if bold is None else bold,
            italic=self.italic if italic is None else italic,
        )

    def with_size(self, size: float) -> "Font":
        return replace(self, size=size)

    def plain(self) -> "Font":
        return replace(self, bold=False, italic=False)


@dataclass(frozen=True, slots=True)
class StyleRange:
    """A half-open ``[start, end)`` interval carrying one attribute value."""

    start: int
    end: int
    kind: AttributeKind
    value: Any

    @property
    def span(self) -> TextRange:
        return (self.start, self.end)


def clamp_range(start: int, end: int, length: int) -> Optional[TextRange]:
    """Clip ``[start, end)`` to ``[0, length]``; ``None`` when nothing is left."""

    start = max(0, min(start, length))
    end = max(0, min(end, length))
    if end <= start:
        return None
    return (start, end)


def intersection(first: TextRange, second: TextRange) -> Optional[TextRange]:
    start = max(first[0], second[0])
    end = min(first[1], second[1])
    if end <= start:
        return None
    return (start, end)


def intersects(first: TextRange, second: TextRange) -> bool:
    return intersection(first, second) is not None


__all__ = [
    "ALL_KINDS",
    "AttributeKind",
    "Attributes",
    "Font",
    "StyleRange",
    "TextRange",
    "clamp_range",
    "intersection",
    "intersects",
]
