"""Code highlighter plug-in contract and the adapter mapping its output back."""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from markdown_engine.buffer import (
    AttributeKind,
    StyledBuffer,
    intersection,
)
from markdown_engine.config import Options
from markdown_engine.patterns import FENCE
from markdown_engine.runtime import telemetry

from .detector import CodeBlockRange


class CodeHighlighter(Protocol):
    """Styles one code snippet; characters must come back unchanged."""

    def highlight(self, code: str, language: Optional[str]) -> StyledBuffer:
        ...


class DefaultHighlighter:
    """Uniform code font, background and body colour; no language awareness."""

    def __init__(self, options: Options) -> None:
        self.options = options

    def highlight(self, code: str, language: Optional[str]) -> StyledBuffer:
        styled = StyledBuffer(code, name="highlight")
        if code:
            styled.add_attributes(_code_attributes(self.options), styled.full_range)
        return styled


class HighlighterBinding:
    """Owned, swappable highlighter reference with a built-in fallback."""

    def __init__(
        self, options: Options, highlighter: Optional[CodeHighlighter] = None
    ) -> None:
        self.default = DefaultHighlighter(options)
        self._bound: Optional[CodeHighlighter] = highlighter

    @property
    def current(self) -> CodeHighlighter:
        return self._bound if self._bound is not None else self.default

    @property
    def is_default(self) -> bool:
        return self._bound is None

    def bind(self, highlighter: Optional[CodeHighlighter]) -> None:
        self._bound = highlighter


class CodeHighlightAdapter:
    """Renders one fenced block: base code style, muted fences, plug-in runs."""

    def __init__(self, options: Options) -> None:
        self.options = options

    def render(
        self,
        buffer: StyledBuffer,
        block: CodeBlockRange,
        binding: HighlighterBinding,
    ) -> None:
        if block.end > len(buffer) or block.start >= block.end:
            return
        segment = buffer.text[block.start : block.end]
        lines = segment.split("\n")
        opening, closing = lines[0], lines[-1]
        language = opening.replace(FENCE, "").strip() or None
        code = "\n".join(lines[1:-1])
        offset = block.start + len(opening) + 1

        with buffer.editing("render_code_block", preserve_length=True):
            buffer.add_attributes(_code_attributes(self.options), block.span)
            muted = self.options.theme.muted
            buffer.set_attribute(
                AttributeKind.FOREGROUND,
                muted,
                (block.start, block.start + len(opening)),
            )
            buffer.set_attribute(
                AttributeKind.FOREGROUND, muted, (block.end - len(closing), block.end)
            )
            styled = self._highlight(binding, code, language, block)
            for run in styled.style_runs():
                target = intersection(
                    (offset + run.start, offset + run.end), block.span
                )
                if target is None:
                    continue
                for kind, value in run.attributes.items():
                    buffer.set_attribute(kind, value, target)

    def _highlight(
        self,
        binding: HighlighterBinding,
        code: str,
        language: Optional[str],
        block: CodeBlockRange,
    ) -> StyledBuffer:
        try:
            styled = binding.current.highlight(code, language)
        except Exception as exc:
            telemetry.record_event(
                "highlight.failed",
                level="warning",
                data={
                    "highlighter": type(binding.current).__name__,
                    "language": language,
                    "block": block.span,
                    "error": repr(exc),
                },
            )
            return binding.default.highlight(code, language)
        if styled.text == code:
            return styled
        telemetry.record_event(
            "highlight.contract_violation",
            level="warning",
            data={
                "highlighter": type(binding.current).__name__,
                "language": language,
                "block": block.span,
                "expected_length": len(code),
                "actual_length": len(styled),
            },
        )
        return binding.default.highlight(code, language)


def _code_attributes(options: Options) -> Dict[AttributeKind, Any]:
    return {
        AttributeKind.FONT: options.code_font,
        AttributeKind.FOREGROUND: options.theme.text,
        AttributeKind.BACKGROUND: options.theme.code_background,
        AttributeKind.LINK: None,
        AttributeKind.STRIKETHROUGH: None,
        AttributeKind.HIDDEN: None,
    }


__all__ = [
    "CodeHighlightAdapter",
    "CodeHighlighter",
    "DefaultHighlighter",
    "HighlighterBinding",
]
