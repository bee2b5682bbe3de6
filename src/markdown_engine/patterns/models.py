"""Match records produced by the pattern library."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from markdown_engine.buffer import TextRange


class Construct(str, Enum):
    """Markdown constructs recognised by the pattern library."""

    SETEXT_HEADER = "setext_header"
    ATX_HEADER = "atx_header"
    LIST = "list"
    BLOCKQUOTE = "blockquote"
    AUTOLINK = "autolink"
    INLINE_LINK = "inline_link"
    ITALIC = "italic"
    BOLD = "bold"
    STRIKETHROUGH = "strikethrough"
    HASHTAG = "hashtag"
    CODE_SPAN = "code_span"


@dataclass(frozen=True, slots=True)
class PatternMatch:
    """One occurrence of a construct: outer range plus named sub-ranges."""

    construct: Construct
    start: int
    end: int
    parts: Mapping[str, TextRange] = field(default_factory=dict)
    level: int = 0

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("match start must not exceed its end")
        object.__setattr__(self, "parts", MappingProxyType(dict(self.parts)))

    @property
    def span(self) -> TextRange:
        return (self.start, self.end)

    def part(self, name: str) -> Optional[TextRange]:
        return self.parts.get(name)


__all__ = ["Construct", "PatternMatch"]
