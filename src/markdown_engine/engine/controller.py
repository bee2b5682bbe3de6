"""Incremental controller: full and per-paragraph style passes over a buffer."""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from typing import List, Optional

from markdown_engine.buffer import BufferEdit, StyledBuffer, TextRange
from markdown_engine.buffer.paragraphs import (
    line_end,
    next_line,
    paragraph_range,
    previous_line,
)
from markdown_engine.codeblocks import (
    CodeBlockDetector,
    CodeHighlightAdapter,
    CodeHighlighter,
    HighlighterBinding,
    blocks_intersecting,
)
from markdown_engine.config import Options
from markdown_engine.patterns import setext_underline_level
from markdown_engine.runtime import telemetry
from markdown_engine.styling import StyleApplicator

from .scheduler import PassScheduler


@dataclass(slots=True, eq=False)
class _DeferredEdit:
    """Edit range waiting in a scheduler, kept in step with later edits."""

    range: TextRange
    length_delta: int

    def follow(self, edit: BufferEdit) -> None:
        inserted_start, inserted_end = edit.range
        removed_end = inserted_end - edit.length_delta
        self.range = (
            _shift(self.range[0], inserted_start, removed_end, inserted_end),
            _shift(self.range[1], inserted_start, removed_end, inserted_end),
        )


@dataclass(slots=True)
class _Attachment:
    listener: object
    scheduler: Optional[PassScheduler]
    deferred: List[_DeferredEdit]


class MarkdownStyler:
    """Styles a :class:`StyledBuffer` on load and after every character edit.

    ``process_initial`` reconciles the whole document. ``notify_edit``
    restyles only the paragraph around an edit, plus any fenced block that
    touches it; fences are always searched for over the whole text.
    """

    def __init__(
        self,
        options: Optional[Options] = None,
        highlighter: Optional[CodeHighlighter] = None,
        *,
        logger_name: str = "markdown_engine.engine",
    ) -> None:
        self.options = options or Options()
        self.applicator = StyleApplicator(self.options)
        self.detector = CodeBlockDetector()
        self.code_adapter = CodeHighlightAdapter(self.options)
        self.binding = HighlighterBinding(self.options, highlighter)
        self.logger_name = logger_name
        self._attachments: weakref.WeakKeyDictionary[
            StyledBuffer, _Attachment
        ] = weakref.WeakKeyDictionary()

    @property
    def highlighter(self) -> CodeHighlighter:
        return self.binding.current

    def set_highlighter(self, highlighter: Optional[CodeHighlighter]) -> None:
        """Swap the code highlighter; ``None`` restores the built-in default."""

        self.binding.bind(highlighter)
        telemetry.record_event(
            "styler.highlighter",
            level="debug",
            data={"highlighter": type(self.binding.current).__name__},
            logger_name=self.logger_name,
        )

    # -- passes ----------------------------------------------------------

    def process_initial(self, buffer: StyledBuffer) -> None:
        if not buffer.text.strip():
            self._skip(buffer, "process_initial")
            return
        with telemetry.span(
            name="styler::process_initial",
            logger_name=self.logger_name,
            component="styler",
            metadata={"buffer": buffer.name, "length": len(buffer)},
        ) as handle:
            with buffer.editing("process_initial", preserve_length=True):
                full = buffer.full_range
                self.applicator.reset(buffer, full)
                blocks = self.detector.find_code_blocks(buffer.text)
                self.applicator.apply(buffer, full, blocks, reset_font=False)
                for block in blocks:
                    self.code_adapter.render(buffer, block, self.binding)
            handle.add_metadata("code_blocks", len(blocks))

    def force_full_render(self, buffer: StyledBuffer) -> None:
        self.process_initial(buffer)

    def notify_edit(
        self, buffer: StyledBuffer, edited_range: TextRange, length_delta: int = 0
    ) -> None:
        """Restyle the paragraph around ``edited_range`` (post-edit offsets)."""

        if not len(buffer):
            self._skip(buffer, "notify_edit")
            return
        text = buffer.text
        paragraph = self.edit_paragraph(text, edited_range)
        with telemetry.span(
            name="styler::notify_edit",
            logger_name=self.logger_name,
            component="styler",
            metadata={
                "buffer": buffer.name,
                "range": edited_range,
                "delta": length_delta,
            },
        ) as handle:
            with buffer.editing("notify_edit", preserve_length=True):
                blocks = self.detector.find_code_blocks(text)
                self.applicator.apply(buffer, paragraph, blocks)
                touched = blocks_intersecting(blocks, paragraph)
                for block in touched:
                    self.code_adapter.render(buffer, block, self.binding)
            handle.add_metadata("paragraph", paragraph)
            handle.add_metadata("code_blocks", len(touched))

    def edit_paragraph(self, text: str, edited_range: TextRange) -> TextRange:
        """Lines a pass must cover after an edit to ``edited_range``.

        A line split also pulls in the line after it. A Setext title and its
        ``=`` underline are always restyled together, and so is every ``=``
        line stacked above an edited one.
        """

        length = len(text)
        start = max(0, min(edited_range[0], length))
        end = max(start, min(edited_range[1], length))
        first, last = paragraph_range(text, (start, end))
        if "\n" in text[start:end] and last < length:
            last = line_end(text, last)

        while _underline_candidate(text[first : line_end(text, first)]):
            previous = previous_line(text, (first, last))
            if previous is None:
                break
            first = previous[0]
        following = next_line(text, (first, last))
        if following is not None:
            underline = text[following[0] : following[1]]
            if setext_underline_level(underline) == 1:
                last = following[1]
        return (first, last)

    # -- host binding ----------------------------------------------------

    def attach(
        self, buffer: StyledBuffer, scheduler: Optional[PassScheduler] = None
    ) -> None:
        """Restyle ``buffer`` after each character edit, now or via ``scheduler``.

        Attribute-only edits (including the ones passes make) are ignored.
        """

        self.detach(buffer)
        attachment = _Attachment(listener=None, scheduler=scheduler, deferred=[])

        def on_edit(edited: StyledBuffer, edit: BufferEdit) -> None:
            if not edit.characters_changed:
                return
            for waiting in attachment.deferred:
                waiting.follow(edit)
            if not len(edited):
                return
            if scheduler is None:
                self.notify_edit(edited, edit.range, edit.length_delta)
                return
            deferred = _DeferredEdit(edit.range, edit.length_delta)
            attachment.deferred.append(deferred)
            scheduler.schedule(
                edited.name,
                lambda: self._run_deferred(edited, attachment, deferred),
                label="notify_edit",
            )

        attachment.listener = on_edit
        buffer.add_listener(on_edit)
        self._attachments[buffer] = attachment

    def detach(self, buffer: StyledBuffer) -> None:
        attachment = self._attachments.pop(buffer, None)
        if attachment is None:
            return
        buffer.remove_listener(attachment.listener)  # type: ignore[arg-type]
        if attachment.scheduler is not None and attachment.deferred:
            attachment.scheduler.drop_pending(buffer.name)
        attachment.deferred.clear()

    def is_attached(self, buffer: StyledBuffer) -> bool:
        return buffer in self._attachments

    def _run_deferred(
        self, buffer: StyledBuffer, attachment: _Attachment, deferred: _DeferredEdit
    ) -> None:
        if deferred in attachment.deferred:
            attachment.deferred.remove(deferred)
        self.notify_edit(buffer, deferred.range, deferred.length_delta)

    def _skip(self, buffer: StyledBuffer, operation: str) -> None:
        telemetry.record_event(
            "styler.skip_empty",
            level="debug",
            data={"buffer": buffer.name, "operation": operation},
            logger_name=self.logger_name,
        )


def _underline_candidate(line: str) -> bool:
    stripped = line.rstrip()
    return bool(stripped) and not stripped.strip("=")


def _shift(offset: int, start: int, removed_end: int, inserted_end: int) -> int:
    if offset <= start:
        return offset
    if offset >= removed_end:
        return offset + inserted_end - removed_end
    return inserted_end


__all__ = ["MarkdownStyler"]
