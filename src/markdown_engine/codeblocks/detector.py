"""Fenced code block detection over a whole buffer."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from markdown_engine.buffer import TextRange, intersects

FENCED_BLOCK = re.compile(
    r"^```(?P<language>[A-Za-z0-9_+#.-]*)\n(?P<content>[\s\S]*?)\n```$",
    re.MULTILINE,
)


@dataclass(frozen=True, slots=True)
class CodeBlockRange:
    """A fenced block: outer range, inner content range and language tag."""

    start: int
    end: int
    content_start: int
    content_end: int
    language: Optional[str] = None

    @property
    def span(self) -> TextRange:
        return (self.start, self.end)

    @property
    def content_span(self) -> TextRange:
        return (self.content_start, self.content_end)

    def intersects(self, span: TextRange) -> bool:
        return intersects(self.span, span)

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end


class CodeBlockDetector:
    """Finds fenced blocks; callers always scan the entire text.

    The first closing fence after an opening fence ends the block, and blocks
    never nest.
    """

    pattern = FENCED_BLOCK

    def find_code_blocks(self, text: str) -> List[CodeBlockRange]:
        blocks: List[CodeBlockRange] = []
        for match in self.pattern.finditer(text):
            content_start, content_end = match.span("content")
            blocks.append(
                CodeBlockRange(
                    start=match.start(),
                    end=match.end(),
                    content_start=content_start,
                    content_end=content_end,
                    language=match.group("language") or None,
                )
            )
        return blocks


def blocks_intersecting(
    blocks: Sequence[CodeBlockRange], span: TextRange
) -> List[CodeBlockRange]:
    return [block for block in blocks if block.intersects(span)]


def offset_in_blocks(blocks: Sequence[CodeBlockRange], offset: int) -> bool:
    return any(block.contains(offset) for block in blocks)


__all__ = [
    "CodeBlockDetector",
    "CodeBlockRange",
    "FENCED_BLOCK",
    "blocks_intersecting",
    "offset_in_blocks",
]
