from __future__ import annotations

from typing import List

import pytest

from markdown_engine.buffer import (
    AttributeKind,
    BufferEdit,
    BufferRangeError,
    ContentLengthError,
    EditMask,
    Font,
    StyledBuffer,
    clamp_range,
    paragraph_range,
)
from markdown_engine.buffer.paragraphs import next_line, previous_line


def make_buffer(text: str = "ab") -> StyledBuffer:
    buffer = StyledBuffer(text, name="test")
    buffer.set_attribute(AttributeKind.FOREGROUND, "red", buffer.full_range)
    return buffer


def test_insert_inherits_preceding_attributes() -> None:
    buffer = make_buffer()
    buffer.insert(2, "c")
    assert buffer.text == "abc"
    assert buffer.attribute(AttributeKind.FOREGROUND, 2) == "red"


def test_insert_at_start_inherits_following_attributes() -> None:
    buffer = make_buffer()
    buffer.insert(0, "z")
    assert buffer.attribute(AttributeKind.FOREGROUND, 0) == "red"


def test_insert_into_empty_buffer_has_no_attributes() -> None:
    buffer = StyledBuffer()
    buffer.insert(0, "x")
    assert buffer.attributes_at(0) == {}


def test_delete_and_replace() -> None:
    buffer = make_buffer("hello world")
    buffer.delete(5, 11)
    assert buffer.text == "hello"
    new_range = buffer.replace_characters(0, 1, "J")
    assert new_range == (0, 1)
    assert buffer.text == "Jello"


def test_set_text_clears_attributes() -> None:
    buffer = make_buffer()
    buffer.set_text("fresh")
    assert buffer.text == "fresh"
    assert all(not buffer.attributes_at(offset) for offset in range(5))


def test_out_of_range_offsets_raise() -> None:
    buffer = make_buffer()
    with pytest.raises(BufferRangeError) as excinfo:
        buffer.set_attribute(AttributeKind.LINK, "x", (0, 10))
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.span == (0, 10)
    with pytest.raises(BufferRangeError):
        buffer.insert(5, "x")
    with pytest.raises(BufferRangeError):
        buffer.attribute(AttributeKind.FONT, 2)


def test_listeners_receive_one_coalesced_edit() -> None:
    buffer = make_buffer()
    edits: List[BufferEdit] = []
    buffer.add_listener(lambda _buffer, edit: edits.append(edit))

    with buffer.editing("combo"):
        buffer.insert(0, "x")
        buffer.set_attribute(AttributeKind.LINK, "u", (0, 3))

    assert len(edits) == 1
    edit = edits[0]
    assert edit.mask == EditMask.CHARACTERS | EditMask.ATTRIBUTES
    assert edit.characters_changed
    assert edit.range == (0, 3)
    assert edit.length_delta == 1


def test_attribute_only_edit_mask() -> None:
    buffer = make_buffer()
    edits: List[BufferEdit] = []
    buffer.add_listener(lambda _buffer, edit: edits.append(edit))
    buffer.set_attribute(AttributeKind.HIDDEN, True, (0, 1))
    assert edits[-1].mask == EditMask.ATTRIBUTES
    assert not edits[-1].characters_changed


def test_removed_listener_is_not_called() -> None:
    buffer = make_buffer()
    edits: List[BufferEdit] = []

    def listener(_buffer: StyledBuffer, edit: BufferEdit) -> None:
        edits.append(edit)

    buffer.add_listener(listener)
    buffer.remove_listener(listener)
    buffer.insert(0, "x")
    assert edits == []


def test_preserve_length_transaction_rejects_resize() -> None:
    buffer = make_buffer()
    with pytest.raises(ContentLengthError):
        with buffer.editing("styles", preserve_length=True):
            buffer.insert(0, "y")
    assert not buffer.in_transaction


def test_version_bumps_once_per_transaction() -> None:
    buffer = make_buffer()
    version = buffer.version
    with buffer.editing():
        buffer.set_attribute(AttributeKind.LINK, "a", (0, 1))
        buffer.set_attribute(AttributeKind.LINK, "b", (1, 2))
    assert buffer.version == version + 1


def test_runs_group_equal_values() -> None:
    buffer = StyledBuffer("abcd")
    buffer.set_attribute(AttributeKind.LINK, "x", (1, 3))
    runs = [(run.span, run.value) for run in buffer.runs(AttributeKind.LINK)]
    assert runs == [((0, 1), None), ((1, 3), "x"), ((3, 4), None)]


def test_style_runs_and_mirror() -> None:
    buffer = StyledBuffer("abcd", name="doc")
    buffer.add_attributes(
        {AttributeKind.FOREGROUND: "blue", AttributeKind.STRIKETHROUGH: True},
        (2, 4),
    )
    mirror = buffer.mirror()
    assert mirror.name == "doc"
    assert [mirror.text_for(run) for run in mirror.runs] == ["ab", "cd"]
    assert mirror.runs[0].attributes == {}
    assert mirror.runs[1].attributes == {
        AttributeKind.FOREGROUND: "blue",
        AttributeKind.STRIKETHROUGH: True,
    }


def test_font_validation_and_traits() -> None:
    with pytest.raises(ValueError):
        Font("", 12.0)
    with pytest.raises(ValueError):
        Font("mono", 0)
    font = Font("mono", 12.0).with_traits(bold=True)
    assert font.bold and not font.italic
    assert font.with_traits(italic=True).plain() == Font("mono", 12.0)


def test_clamp_range() -> None:
    assert clamp_range(-2, 5, 3) == (0, 3)
    assert clamp_range(4, 6, 3) is None
    assert clamp_range(1, 1, 3) is None


def test_paragraph_range() -> None:
    text = "one\ntwo\nthree"
    assert paragraph_range(text, (5, 5)) == (4, 8)
    assert paragraph_range(text, (0, 13)) == (0, 13)
    assert paragraph_range(text, (3, 4)) == (0, 4)
    assert paragraph_range("a\n", (2, 2)) == (2, 2)


def test_neighbour_lines() -> None:
    text = "one\ntwo\nthree"
    assert previous_line(text, (4, 8)) == (0, 4)
    assert previous_line(text, (0, 4)) is None
    assert next_line(text, (4, 8)) == (8, 13)
    assert next_line(text, (8, 13)) is None
