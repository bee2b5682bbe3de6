"""Convert a styled buffer into ``rich`` renderables."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from rich.style import Style
from rich.text import Text

from markdown_engine.buffer import AttributeKind, BufferMirror, Font, StyledBuffer
from markdown_engine.config import Options
from markdown_engine.styling.fonts import is_header_font


def render_rich_text(
    source: Union[StyledBuffer, BufferMirror],
    options: Optional[Options] = None,
    *,
    reveal_hidden: bool = False,
) -> Text:
    """Build a :class:`rich.text.Text` from buffer attributes.

    Terminals have a single font size, so headers (a bold font larger than the
    base font) render bold and underlined. Hidden syntax is left out unless
    ``reveal_hidden`` is set.
    """

    options = options or Options()
    mirror = source.mirror() if isinstance(source, StyledBuffer) else source
    rendered = Text(no_wrap=False, end="")
    for run in mirror.runs:
        if run.attributes.get(AttributeKind.HIDDEN) and not reveal_hidden:
            continue
        rendered.append(mirror.text_for(run), style=style_for(run.attributes, options))
    return rendered


def style_for(attributes: Mapping[AttributeKind, Any], options: Options) -> Style:
    font = attributes.get(AttributeKind.FONT)
    bold = italic = underline = False
    if isinstance(font, Font):
        bold = font.bold
        italic = font.italic
        underline = is_header_font(font, options.note_font)
    return Style(
        bold=bold or None,
        italic=italic or None,
        underline=underline or None,
        strike=bool(attributes.get(AttributeKind.STRIKETHROUGH)) or None,
        color=_colour(attributes.get(AttributeKind.FOREGROUND), options),
        bgcolor=_colour(attributes.get(AttributeKind.BACKGROUND), options),
        link=attributes.get(AttributeKind.LINK),
    )


def _colour(value: Any, options: Options) -> Optional[str]:
    if not isinstance(value, str) or value == options.theme.hidden:
        return None
    return value


__all__ = ["render_rich_text", "style_for"]
