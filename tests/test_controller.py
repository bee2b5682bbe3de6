from __future__ import annotations

import gc
import weakref
from typing import List, Optional, Tuple

import pytest

from markdown_engine.buffer import AttributeKind, Font, StyledBuffer, TextRange
from markdown_engine.config import Options
from markdown_engine.engine import MarkdownStyler, PassScheduler

DOCUMENT = (
    "# Title\n"
    "\n"
    "Some **bold** and *em* text with `code`.\n"
    "- item one\n"
    "> quoted #tag\n"
    "See [docs](https://d.io) or https://example.com.\n"
    "\n"
    "```python\n"
    "x = 1\n"
    "```\n"
    "Setext\n"
    "===\n"
    "end ~~gone~~\n"
)


class RecordingHighlighter:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, Optional[str]]] = []

    def highlight(self, code: str, language: Optional[str]) -> StyledBuffer:
        self.calls.append((code, language))
        return StyledBuffer(code)


class CountingStyler(MarkdownStyler):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.edits: List[TextRange] = []

    def notify_edit(self, buffer, edited_range, length_delta=0) -> None:
        self.edits.append(edited_range)
        super().notify_edit(buffer, edited_range, length_delta)


def full_render(text: str, options: Optional[Options] = None) -> StyledBuffer:
    buffer = StyledBuffer(text, name="full")
    MarkdownStyler(options).process_initial(buffer)
    return buffer


def type_out(
    text: str, options: Optional[Options] = None
) -> Tuple[StyledBuffer, MarkdownStyler]:
    buffer = StyledBuffer(name="typed")
    styler = MarkdownStyler(options)
    styler.attach(buffer)
    for offset, character in enumerate(text):
        buffer.insert(offset, character)
    return buffer, styler


def test_header_example() -> None:
    buffer = full_render("# Header 1")
    base = Options().note_font
    header = buffer.attribute(AttributeKind.FONT, 4)
    assert header == Font(base.family, base.size * 2.0, bold=True)
    assert buffer.attribute(AttributeKind.FOREGROUND, 0) == Options().theme.muted


def test_fenced_block_invokes_highlighter_once() -> None:
    highlighter = RecordingHighlighter()
    styler = MarkdownStyler(highlighter=highlighter)
    buffer = StyledBuffer("```swift\nlet x = 42\n```")
    styler.process_initial(buffer)
    assert highlighter.calls == [("let x = 42", "swift")]


@pytest.mark.parametrize("text", ["", "   ", " \n\t\n"])
def test_empty_and_whitespace_buffers_are_noops(text: str) -> None:
    buffer = StyledBuffer(text)
    styler = MarkdownStyler()
    styler.process_initial(buffer)
    styler.force_full_render(buffer)
    styler.notify_edit(StyledBuffer(), (0, 0), 0)
    assert len(buffer) == len(text)
    assert all(not buffer.attributes_at(offset) for offset in range(len(text)))


def test_notify_edit_restyles_whitespace_only_buffer() -> None:
    options = Options()
    buffer = StyledBuffer(" \n\t")
    MarkdownStyler(options).notify_edit(buffer, (0, 3))
    assert buffer.text == " \n\t"
    for offset in range(len(buffer)):
        attributes = buffer.attributes_at(offset)
        assert attributes[AttributeKind.FONT] == options.note_font
        assert attributes[AttributeKind.FOREGROUND] == options.theme.text
        assert AttributeKind.BACKGROUND not in attributes


def test_full_pass_is_idempotent() -> None:
    buffer = StyledBuffer(DOCUMENT)
    styler = MarkdownStyler()
    styler.process_initial(buffer)
    first = buffer.style_runs()
    styler.force_full_render(buffer)
    assert buffer.style_runs() == first


@pytest.mark.parametrize(
    "text",
    [
        DOCUMENT,
        "a\n==\n==\n",
        "x\n==\n==",
        "**b**\n**b**\n==\n==\n*i*",
        "x\n=\n==\n",
    ],
)
def test_incremental_typing_matches_full_pass(text: str) -> None:
    typed, _ = type_out(text)
    assert typed.text == text
    assert typed.style_runs() == full_render(text).style_runs()


def test_stacked_underline_is_plain_text() -> None:
    buffer = full_render("x\n==\n==")
    muted = Options().theme.muted
    assert buffer.attribute(AttributeKind.FOREGROUND, 2) == muted
    assert buffer.attribute(AttributeKind.FOREGROUND, 5) == Options().theme.text
    assert not buffer.attribute(AttributeKind.FONT, 5).bold
    assert MarkdownStyler().edit_paragraph("x\n==\n==", (6, 7)) == (0, 7)


def test_incremental_typing_matches_full_pass_with_hidden_syntax() -> None:
    options = Options(hide_syntax=True)
    typed, _ = type_out(DOCUMENT, options)
    assert typed.style_runs() == full_render(DOCUMENT, options).style_runs()


def test_notify_edit_restyles_only_the_paragraph() -> None:
    buffer = StyledBuffer("# A\nplain")
    styler = MarkdownStyler()
    styler.process_initial(buffer)
    buffer.set_attribute(AttributeKind.FOREGROUND, "sentinel", (4, 9))

    buffer.insert(2, "B")
    styler.notify_edit(buffer, (2, 3), 1)

    assert buffer.attribute(AttributeKind.FONT, 3).bold
    assert buffer.attribute(AttributeKind.FOREGROUND, 5) == "sentinel"


def test_notify_edit_clamps_stale_ranges() -> None:
    buffer = StyledBuffer("**b**")
    MarkdownStyler().notify_edit(buffer, (3, 40), 0)
    assert buffer.attribute(AttributeKind.FONT, 2).bold


def test_edit_paragraph_keeps_setext_pairs_together() -> None:
    styler = MarkdownStyler()
    text = "Title\n===\nnext"
    assert styler.edit_paragraph(text, (7, 8)) == (0, 10)
    assert styler.edit_paragraph(text, (2, 3)) == (0, 10)
    assert styler.edit_paragraph("Title\n---\n", (2, 3)) == (0, 6)


def test_edit_paragraph_includes_line_after_split() -> None:
    styler = MarkdownStyler()
    assert styler.edit_paragraph("ab\ncd\nef", (2, 3)) == (0, 6)


def test_removing_underline_unstyles_title() -> None:
    buffer = StyledBuffer("Title\n==")
    styler = MarkdownStyler()
    styler.attach(buffer)
    styler.process_initial(buffer)
    assert buffer.attribute(AttributeKind.FONT, 0).bold

    buffer.delete(7, 8)
    assert not buffer.attribute(AttributeKind.FONT, 0).bold


def test_attached_styler_ignores_attribute_only_edits() -> None:
    buffer = StyledBuffer("text")
    styler = CountingStyler()
    styler.attach(buffer)

    buffer.set_attribute(AttributeKind.LINK, "x", (0, 1))
    assert styler.edits == []

    buffer.insert(4, "!")
    assert styler.edits == [(4, 5)]


def test_attached_styler_ignores_emptied_buffer() -> None:
    buffer = StyledBuffer("text")
    styler = CountingStyler()
    styler.attach(buffer)
    buffer.delete(0, 4)
    assert styler.edits == []


def test_detach_stops_restyling() -> None:
    buffer = StyledBuffer("text")
    styler = CountingStyler()
    styler.attach(buffer)
    assert styler.is_attached(buffer)
    styler.detach(buffer)
    buffer.insert(0, "x")
    assert styler.edits == []
    assert not styler.is_attached(buffer)


def test_scheduled_passes_run_in_order_with_shifted_ranges() -> None:
    buffer = StyledBuffer("hello\nworld")
    scheduler = PassScheduler()
    styler = MarkdownStyler()
    styler.attach(buffer, scheduler)

    buffer.insert(len(buffer), " **x**")
    buffer.insert(0, "# ")
    assert scheduler.pending_count == 2
    assert buffer.attribute(AttributeKind.FONT, len(buffer) - 3) is None

    assert scheduler.run_pending() == 2
    assert buffer.text == "# hello\nworld **x**"
    assert buffer.attribute(AttributeKind.FONT, len(buffer) - 3).bold
    assert buffer.attribute(AttributeKind.FONT, 3).size > Options().note_font.size


def test_detach_drops_pending_passes() -> None:
    buffer = StyledBuffer("hello")
    scheduler = PassScheduler()
    styler = MarkdownStyler()
    styler.attach(buffer, scheduler)
    buffer.insert(0, "x")
    styler.detach(buffer)
    assert scheduler.pending_count == 0


def test_set_highlighter_swaps_and_restores_default() -> None:
    styler = MarkdownStyler()
    default = styler.highlighter
    custom = RecordingHighlighter()
    styler.set_highlighter(custom)
    assert styler.highlighter is custom

    buffer = StyledBuffer("```\nx\n```")
    styler.force_full_render(buffer)
    assert custom.calls == [("x", None)]

    styler.set_highlighter(None)
    assert styler.highlighter is default


class FailingHighlighter:
    def highlight(self, code: str, language: Optional[str]) -> StyledBuffer:
        if language == "bad":
            raise RuntimeError("no grammar for bad")
        styled = StyledBuffer(code)
        styled.set_attribute(AttributeKind.FOREGROUND, "#ff0000", styled.full_range)
        return styled


def test_failing_highlighter_falls_back_and_renders_later_blocks() -> None:
    options = Options()
    buffer = StyledBuffer("```bad\nx\n```\n```py\ny\n```")
    MarkdownStyler(options, FailingHighlighter()).process_initial(buffer)

    assert buffer.attribute(AttributeKind.FONT, 7) == options.code_font
    assert buffer.attribute(AttributeKind.FOREGROUND, 7) == options.theme.text
    assert buffer.attribute(AttributeKind.FOREGROUND, 19) == "#ff0000"
    background = buffer.attribute(AttributeKind.BACKGROUND, 19)
    assert background == options.theme.code_background


def test_collected_buffer_leaves_no_attachment() -> None:
    styler = MarkdownStyler()
    buffer = StyledBuffer("text")
    styler.attach(buffer)
    ref = weakref.ref(buffer)
    del buffer
    gc.collect()

    assert ref() is None
    assert len(styler._attachments) == 0
    assert not styler.is_attached(StyledBuffer("text"))
