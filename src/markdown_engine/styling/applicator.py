"""Attribute mutations for every non-code markdown construct in a range."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Sequence

from markdown_engine.buffer import (
    AttributeKind,
    StyledBuffer,
    TextRange,
    clamp_range,
)
from markdown_engine.codeblocks.detector import CodeBlockRange, offset_in_blocks
from markdown_engine.config import Options
from markdown_engine.patterns import (
    FENCE,
    MATCHERS,
    PATTERN_ORDER,
    Construct,
    PatternMatch,
)

from .fonts import header_font, hidden_font
from .links import resolve_link_target, tag_link, trim_autolink

Handler = Callable[[StyledBuffer, PatternMatch], None]


class StyleApplicator:
    """Applies markdown styling to one range of a :class:`StyledBuffer`.

    Malformed markdown is never an error: anything the patterns do not
    recognise stays in the base style. Sub-ranges are clamped to the buffer
    before every write.
    """

    def __init__(self, options: Options) -> None:
        self.options = options
        self._handlers: Dict[Construct, Handler] = {
            Construct.SETEXT_HEADER: self._style_setext_header,
            Construct.ATX_HEADER: self._style_atx_header,
            Construct.LIST: self._style_list,
            Construct.BLOCKQUOTE: self._style_blockquote,
            Construct.AUTOLINK: self._style_autolink,
            Construct.INLINE_LINK: self._style_inline_link,
            Construct.ITALIC: self._style_italic,
            Construct.BOLD: self._style_bold,
            Construct.STRIKETHROUGH: self._style_strikethrough,
            Construct.HASHTAG: self._style_hashtag,
            Construct.CODE_SPAN: self._style_code_span,
        }

    def reset(
        self, buffer: StyledBuffer, span: TextRange, *, font: bool = True
    ) -> None:
        """Return ``span`` to the base style, dropping stale markdown attributes."""

        clamped = clamp_range(*span, len(buffer))
        if clamped is None:
            return
        with buffer.editing("reset_styles", preserve_length=True):
            if font:
                buffer.set_attribute(
                    AttributeKind.FONT, self.options.note_font, clamped
                )
            buffer.set_attribute(
                AttributeKind.FOREGROUND, self.options.theme.text, clamped
            )
            for kind in (
                AttributeKind.BACKGROUND,
                AttributeKind.LINK,
                AttributeKind.STRIKETHROUGH,
                AttributeKind.HIDDEN,
            ):
                buffer.remove_attribute(kind, clamped)

    def apply(
        self,
        buffer: StyledBuffer,
        span: TextRange,
        code_blocks: Sequence[CodeBlockRange] = (),
        *,
        reset_font: bool = True,
    ) -> None:
        """Style ``span``; ``reset_font=False`` when the caller already reset it."""

        clamped = clamp_range(*span, len(buffer))
        if clamped is None:
            return
        text = buffer.text
        with buffer.editing("apply_styles", preserve_length=True):
            self.reset(buffer, clamped, font=reset_font)
            for construct in PATTERN_ORDER:
                if construct is Construct.HASHTAG and not self.options.inline_tags:
                    continue
                handler = self._handlers[construct]
                for match in MATCHERS[construct](text, clamped):
                    if offset_in_blocks(code_blocks, match.start):
                        continue
                    handler(buffer, match)

    # -- primitive writes ----------------------------------------------

    def _set(
        self,
        buffer: StyledBuffer,
        kind: AttributeKind,
        value: Any,
        span: Optional[TextRange],
    ) -> None:
        if span is None:
            return
        clamped = clamp_range(*span, len(buffer))
        if clamped is not None:
            buffer.set_attribute(kind, value, clamped)

    def _syntax(self, buffer: StyledBuffer, span: Optional[TextRange]) -> None:
        """Mute a delimiter and, with ``hide_syntax``, make it unreadable."""

        self._set(buffer, AttributeKind.FOREGROUND, self.options.theme.muted, span)
        if self.options.hide_syntax:
            hidden = hidden_font(self.options.note_font)
            self._set(buffer, AttributeKind.FONT, hidden, span)
            self._set(buffer, AttributeKind.FOREGROUND, self.options.theme.hidden, span)
            self._set(buffer, AttributeKind.HIDDEN, True, span)

    def _add_traits(
        self,
        buffer: StyledBuffer,
        span: Optional[TextRange],
        *,
        bold: Optional[bool] = None,
        italic: Optional[bool] = None,
    ) -> None:
        if span is None:
            return
        clamped = clamp_range(*span, len(buffer))
        if clamped is None:
            return
        for run in list(buffer.runs(AttributeKind.FONT, clamped)):
            if run.value is None:
                continue
            font = run.value.with_traits(bold=bold, italic=italic)
            buffer.set_attribute(AttributeKind.FONT, font, run.span)

    # -- construct handlers --------------------------------------------

    def _style_setext_header(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        font = header_font(self.options.note_font, match.level)
        self._set(buffer, AttributeKind.FONT, font, match.span)
        self._syntax(buffer, match.part("underline"))

    def _style_atx_header(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        font = header_font(self.options.note_font, match.level)
        self._set(buffer, AttributeKind.FONT, font, match.span)
        self._syntax(buffer, match.part("marker"))
        self._syntax(buffer, match.part("closing"))

    def _style_list(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        self._syntax(buffer, match.part("marker"))

    def _style_blockquote(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        quote = self.options.theme.quote
        self._set(buffer, AttributeKind.FOREGROUND, quote, match.span)
        for name, span in match.parts.items():
            if name.startswith("marker"):
                self._syntax(buffer, span)

    def _style_autolink(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        start, end = trim_autolink(buffer.text, match.span)
        if end <= start:
            return
        target = resolve_link_target(buffer.text[start:end])
        self._set(buffer, AttributeKind.LINK, target, (start, end))

    def _style_inline_link(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        parens = match.part("parens")
        self._set(buffer, AttributeKind.LINK, None, parens)
        self._syntax(buffer, parens)
        if match.start < match.parts["open_bracket"][0]:
            self._syntax(buffer, (match.start, match.parts["open_bracket"][0]))
        self._syntax(buffer, match.part("open_bracket"))
        self._syntax(buffer, match.part("close_bracket"))

        url_start, url_end = match.parts["url"]
        target = resolve_link_target(buffer.text[url_start:url_end])
        self._set(buffer, AttributeKind.LINK, target, match.part("text"))

    def _style_italic(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        self._add_traits(buffer, match.part("content"), italic=True)
        self._syntax(buffer, match.part("open"))
        self._syntax(buffer, match.part("close"))

    def _style_bold(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        self._add_traits(buffer, match.part("content"), bold=True)
        self._syntax(buffer, match.part("open"))
        self._syntax(buffer, match.part("close"))

    def _style_strikethrough(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        self._set(buffer, AttributeKind.STRIKETHROUGH, True, match.part("content"))
        self._syntax(buffer, match.part("open"))
        self._syntax(buffer, match.part("close"))

    def _style_hashtag(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        link = tag_link(buffer.text[match.start : match.end])
        if link is None:
            return
        self._set(buffer, AttributeKind.LINK, link, match.span)
        accent = self.options.theme.accent
        self._set(buffer, AttributeKind.FOREGROUND, accent, match.span)

    def _style_code_span(self, buffer: StyledBuffer, match: PatternMatch) -> None:
        if buffer.text.startswith(FENCE, match.start):
            return
        self._set(buffer, AttributeKind.FONT, self.options.code_font, match.span)
        self._set(
            buffer,
            AttributeKind.BACKGROUND,
            self.options.theme.code_background,
            match.span,
        )
        self._syntax(buffer, match.part("open"))
        self._syntax(buffer, match.part("close"))


__all__ = ["StyleApplicator"]
