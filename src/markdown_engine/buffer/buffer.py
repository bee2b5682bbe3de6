"""Mutable text buffer carrying per-offset presentation attributes."""

from __future__ import annotations

from contextlib import AbstractContextManager
from itertools import groupby
from typing import Any, ContextManager, Dict, Iterator, List, Optional

from markdown_engine.runtime import telemetry

from .attributes import (
    ALL_KINDS,
    AttributeKind,
    Attributes,
    StyleRange,
    TextRange,
)
from .sync import (
    BufferEdit,
    BufferListener,
    BufferMirror,
    BufferRangeError,
    EditMask,
    StyledRun,
)


class ContentLengthError(RuntimeError):
    """Raised when a length-preserving transaction resized the buffer."""


class StyledBuffer:
    """Characters plus one attribute layer per :class:`AttributeKind`.

    The host owns character mutation; styling passes only touch attribute
    layers. An absent attribute is stored as ``None``.
    """

    def __init__(self, text: str = "", *, name: str = "default") -> None:
        self.name = name
        self.version = 0
        self._text = text
        self._layers: Dict[AttributeKind, List[Any]] = {
            kind: [None] * len(text) for kind in ALL_KINDS
        }
        self._listeners: List[BufferListener] = []
        self._depth = 0
        self._pending_mask = EditMask.NONE
        self._pending_range: Optional[TextRange] = None
        self._pending_delta = 0

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def __repr__(self) -> str:
        return f"StyledBuffer(name={self.name!r}, length={len(self._text)})"

    @property
    def full_range(self) -> TextRange:
        return (0, len(self._text))

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    # -- listeners -----------------------------------------------------

    def add_listener(self, listener: BufferListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: BufferListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -- transactions --------------------------------------------------

    def editing(
        self, label: str = "edit", *, preserve_length: bool = False
    ) -> "Transaction":
        """Group mutations so listeners see a single coalesced edit."""

        return Transaction(self, label, preserve_length=preserve_length)

    def _begin(self) -> None:
        self._depth += 1

    def _end(self) -> None:
        self._depth -= 1
        if self._depth > 0:
            return
        mask = self._pending_mask
        span = self._pending_range
        delta = self._pending_delta
        self._pending_mask = EditMask.NONE
        self._pending_range = None
        self._pending_delta = 0
        if mask is EditMask.NONE or span is None:
            return
        self.version += 1
        edit = BufferEdit(mask=mask, range=span, length_delta=delta)
        for listener in list(self._listeners):
            listener(self, edit)

    def _note_attributes(self, span: TextRange) -> None:
        self._pending_mask |= EditMask.ATTRIBUTES
        self._pending_range = _union(self._pending_range, span)

    def _note_characters(self, start: int, end: int, inserted: int) -> None:
        delta = inserted - (end - start)
        if self._pending_range is not None:
            pending_start, pending_end = self._pending_range
            self._pending_range = (
                _shift_offset(pending_start, start, end, inserted),
                _shift_offset(pending_end, start, end, inserted),
            )
        self._pending_mask |= EditMask.CHARACTERS
        self._pending_range = _union(self._pending_range, (start, start + inserted))
        self._pending_delta += delta

    # -- character mutation (host side) --------------------------------

    def replace_characters(self, start: int, end: int, text: str) -> TextRange:
        """Replace ``[start, end)`` with ``text`` and return the new range.

        Inserted characters inherit the attributes of the character before
        ``start`` (or the one after the replaced span at offset zero).
        """

        start, end = self._validate((start, end))
        length = len(self._text)
        if start > 0:
            source: Optional[int] = start - 1
        elif end < length:
            source = end
        else:
            source = None

        with self.editing("replace_characters"):
            for kind, layer in self._layers.items():
                value = layer[source] if source is not None else None
                layer[start:end] = [value] * len(text)
            self._text = self._text[:start] + text + self._text[end:]
            self._note_characters(start, end, len(text))
        return (start, start + len(text))

    def insert(self, offset: int, text: str) -> TextRange:
        return self.replace_characters(offset, offset, text)

    def delete(self, start: int, end: int) -> TextRange:
        return self.replace_characters(start, end, "")

    def set_text(self, text: str) -> TextRange:
        """Replace the whole content and drop every attribute."""

        with self.editing("set_text"):
            previous = len(self._text)
            self._text = text
            self._layers = {kind: [None] * len(text) for kind in ALL_KINDS}
            self._note_characters(0, previous, len(text))
        return (0, len(text))

    # -- attribute access ----------------------------------------------

    def attribute(self, kind: AttributeKind, offset: int) -> Any:
        if offset < 0 or offset >= len(self._text):
            raise BufferRangeError("Offset out of range", span=(offset, offset))
        return self._layers[kind][offset]

    def attributes_at(self, offset: int) -> Dict[AttributeKind, Any]:
        if offset < 0 or offset >= len(self._text):
            raise BufferRangeError("Offset out of range", span=(offset, offset))
        return {
            kind: layer[offset]
            for kind, layer in self._layers.items()
            if layer[offset] is not None
        }

    def set_attribute(self, kind: AttributeKind, value: Any, span: TextRange) -> None:
        start, end = self._validate(span)
        if start == end:
            return
        with self.editing("set_attribute"):
            self._layers[kind][start:end] = [value] * (end - start)
            self._note_attributes((start, end))

    def add_attributes(self, attributes: Attributes, span: TextRange) -> None:
        start, end = self._validate(span)
        if start == end:
            return
        with self.editing("add_attributes"):
            for kind, value in attributes.items():
                self._layers[AttributeKind(kind)][start:end] = [value] * (end - start)
            self._note_attributes((start, end))

    def remove_attribute(self, kind: AttributeKind, span: TextRange) -> None:
        self.set_attribute(kind, None, span)

    def runs(
        self, kind: AttributeKind, span: Optional[TextRange] = None
    ) -> Iterator[StyleRange]:
        """Yield maximal runs of equal value (``None`` runs included)."""

        start, end = self._validate(span or self.full_range)
        position = start
        for value, group in groupby(self._layers[kind][start:end]):
            size = sum(1 for _ in group)
            yield StyleRange(position, position + size, kind, value)
            position += size

    def style_runs(self, span: Optional[TextRange] = None) -> List[StyledRun]:
        start, end = self._validate(span or self.full_range)
        columns = zip(*(self._layers[kind][start:end] for kind in ALL_KINDS))
        result: List[StyledRun] = []
        position = start
        for values, group in groupby(columns):
            size = sum(1 for _ in group)
            attributes = {
                kind: value
                for kind, value in zip(ALL_KINDS, values)
                if value is not None
            }
            result.append(StyledRun(position, position + size, attributes))
            position += size
        return result

    def mirror(self) -> BufferMirror:
        return BufferMirror(
            name=self.name, text=self._text, runs=tuple(self.style_runs())
        )

    def _validate(self, span: TextRange) -> TextRange:
        start, end = span
        if start < 0 or end > len(self._text) or start > end:
            raise BufferRangeError("Range out of bounds", span=span)
        return (start, end)


class Transaction(AbstractContextManager["Transaction"]):
    """Begin/end editing bracket around a group of buffer mutations."""

    def __init__(
        self, buffer: StyledBuffer, label: str, *, preserve_length: bool = False
    ) -> None:
        self.buffer = buffer
        self.label = label
        self.preserve_length = preserve_length
        self._span_cm: Optional[ContextManager[object]] = None
        self._length_before = 0

    def __enter__(self) -> "Transaction":
        self._length_before = len(self.buffer)
        if not self.buffer.in_transaction:
            self._span_cm = telemetry.span(
                name=f"buffer::{self.label}",
                component="buffer",
                metadata={"buffer": self.buffer.name},
            )
            self._span_cm.__enter__()
        self.buffer._begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if (
                exc_type is None
                and self.preserve_length
                and len(self.buffer) != self._length_before
            ):
                raise ContentLengthError(
                    f"Transaction '{self.label}' changed buffer length "
                    f"from {self._length_before} to {len(self.buffer)}"
                )
        finally:
            self.buffer._end()
            if self._span_cm is not None:
                self._span_cm.__exit__(exc_type, exc, tb)
        return False


def _union(first: Optional[TextRange], second: TextRange) -> TextRange:
    if first is None:
        return second
    return (min(first[0], second[0]), max(first[1], second[1]))


def _shift_offset(offset: int, start: int, end: int, inserted: int) -> int:
    if offset <= start:
        return offset
    if offset >= end:
        return offset + inserted - (end - start)
    return start + inserted
