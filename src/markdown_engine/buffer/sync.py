"""Boundary types exchanged between styled buffers and their hosts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Flag, auto
from typing import Any, Dict, Protocol, Tuple

from .attributes import AttributeKind, TextRange


class EditMask(Flag):
    """What a committed buffer transaction changed."""

    NONE = 0
    CHARACTERS = auto()
    ATTRIBUTES = auto()


@dataclass(frozen=True, slots=True)
class BufferEdit:
    """Notification sent to listeners when an outermost transaction ends.

    ``range`` is expressed in post-edit offsets and covers every character
    touched by the transaction; ``length_delta`` is the net change in length.
    """

    mask: EditMask
    range: TextRange
    length_delta: int = 0

    @property
    def characters_changed(self) -> bool:
        return bool(self.mask & EditMask.CHARACTERS)


@dataclass(frozen=True, slots=True)
class StyledRun:
    """Maximal run of characters sharing one complete attribute set."""

    start: int
    end: int
    attributes: Dict[AttributeKind, Any] = field(default_factory=dict)

    @property
    def span(self) -> TextRange:
        return (self.start, self.end)


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot describing a buffer and its styling."""

    name: str
    text: str
    runs: Tuple[StyledRun, ...] = ()

    def text_for(self, run: StyledRun) -> str:
        return self.text[run.start : run.end]


class BufferListener(Protocol):
    """Callable invoked with the buffer and the committed edit."""

    def __call__(self, buffer: Any, edit: BufferEdit) -> None:
        ...


class BufferRangeError(ValueError):
    """Raised when a host passes offsets outside the buffer."""

    def __init__(self, message: str, *, span: TextRange | None = None) -> None:
        super().__init__(message)
        self.span = span


__all__ = [
    "BufferEdit",
    "BufferListener",
    "BufferMirror",
    "BufferRangeError",
    "EditMask",
    "StyledRun",
]
