"""Compiled markdown matchers and their fixed evaluation order.

Every matcher takes the full text plus a ``(start, end)`` search window and
yields :class:`PatternMatch` records in absolute offsets. Patterns are
compiled at import time, so a broken expression fails the import rather than
a style pass.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterator, Optional, Tuple

from markdown_engine.buffer import TextRange

from .models import Construct, PatternMatch

Matcher = Callable[[str, TextRange], Iterator[PatternMatch]]

FENCE = "```"

SETEXT_HEADER = re.compile(
    r"""
    ^(?!={2,}[^\S\n]*\n)
    (?P<title>[^\S\n]*\S[^\n]*?)[^\S\n]*\n
    (?P<underline>={2,})[^\S\n]*
    (?:\n|\Z)
    """,
    re.MULTILINE | re.VERBOSE,
)

# Level 2 ("---") underlines are recognised but not wired into header styling.
SETEXT_UNDERLINE = re.compile(r"^(?P<marker>={2,}|-{2,})[^\S\n]*\n?$")

ATX_HEADER = re.compile(
    r"""
    ^(?P<marker>\#{1,6}\ )
    [^\S\n]*
    (?P<content>[^\n]+?)
    (?:[^\S\n]+(?P<closing>\#+))?
    [^\S\n]*
    (?:\n|\Z)
    """,
    re.MULTILINE | re.VERBOSE,
)

LIST_MARKER = re.compile(r"^[ ]{0,3}(?P<marker>[*+-]|\d+[.])[ ]+", re.MULTILINE)

BLOCKQUOTE = re.compile(r"(?:^[ ]{0,3}>[^\n]*(?:\n|\Z))+", re.MULTILINE)
BLOCKQUOTE_MARKER = re.compile(r"^[ ]{0,3}>[ \t]?", re.MULTILINE)

AUTOLINK = re.compile(
    r"(?:https?|ftp|file)://[-A-Z0-9+&@#/%?=~_|!:,.;()]*[-A-Z0-9+&@#/%=~_|()]",
    re.IGNORECASE,
)

INLINE_LINK = re.compile(
    r"""
    (?P<image>!)?
    \[(?P<text>[^\[\]\n]+)\]
    \(
        [^\S\n]*
        (?P<url>[^\s)]+)
        [^\S\n]*
        (?:(?P<quote>['"])(?P<title>[^\n]*?)(?P=quote)[^\S\n]*)?
    \)
    """,
    re.VERBOSE,
)

ITALIC = re.compile(
    r"(^|[\W_])(?:(?!\1)|(?=^))(\*|_)(?=\S)((?:(?!\2).)*?\S)\2(?!\2)(?=[\W_]|$)",
    re.MULTILINE,
)

BOLD = re.compile(
    r"(^|[\W_])(?:(?!\1)|(?=^))(\*|_)\2(?=\S)(.*?\S)\2\2(?!\2)(?=[\W_]|$)",
    re.MULTILINE,
)

STRIKETHROUGH = re.compile(r"~~(?=\S)(?P<content>.+?)(?<=\S)~~")

HASHTAG = re.compile(
    r"""
    (?:\A|(?<=\s)|(?<=[^\]]\())
    \#(?P<tag>[^\s\#+,?!"`';:.\\(){}\[\]]+)
    """,
    re.VERBOSE,
)

CODE_SPAN = re.compile(
    r"(?<![\\`])(?P<open>`+)(?!`)(?P<content>.+?)(?<!`)(?P=open)(?!`)"
)


def match_setext_headers(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in SETEXT_HEADER.finditer(text, *span):
        yield PatternMatch(
            Construct.SETEXT_HEADER,
            match.start(),
            match.end(),
            {"title": match.span("title"), "underline": match.span("underline")},
            level=1,
        )


def match_atx_headers(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in ATX_HEADER.finditer(text, *span):
        parts = {"marker": match.span("marker"), "content": match.span("content")}
        if match.group("closing"):
            parts["closing"] = match.span("closing")
        yield PatternMatch(
            Construct.ATX_HEADER,
            match.start(),
            match.end(),
            parts,
            level=len(match.group("marker")) - 1,
        )


def match_lists(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in LIST_MARKER.finditer(text, *span):
        yield PatternMatch(
            Construct.LIST,
            match.start(),
            match.end(),
            {"marker": match.span()},
        )


def match_blockquotes(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in BLOCKQUOTE.finditer(text, *span):
        markers = {
            f"marker{index}": inner.span()
            for index, inner in enumerate(
                BLOCKQUOTE_MARKER.finditer(text, match.start(), match.end())
            )
        }
        yield PatternMatch(Construct.BLOCKQUOTE, match.start(), match.end(), markers)


def match_autolinks(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in AUTOLINK.finditer(text, *span):
        yield PatternMatch(Construct.AUTOLINK, match.start(), match.end())


def match_inline_links(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in INLINE_LINK.finditer(text, *span):
        text_start, text_end = match.span("text")
        parts = {
            "open_bracket": (text_start - 1, text_start),
            "text": (text_start, text_end),
            "close_bracket": (text_end, text_end + 1),
            "parens": (text_end + 1, match.end()),
            "url": match.span("url"),
        }
        if match.group("quote"):
            title_start, title_end = match.span("title")
            parts["title"] = (title_start - 1, title_end + 1)
        yield PatternMatch(Construct.INLINE_LINK, match.start(), match.end(), parts)


def match_italic(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in ITALIC.finditer(text, *span):
        start, end = match.span(3)
        yield PatternMatch(
            Construct.ITALIC,
            start - 1,
            end + 1,
            {
                "content": (start, end),
                "open": (start - 1, start),
                "close": (end, end + 1),
            },
        )


def match_bold(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in BOLD.finditer(text, *span):
        delimiter = match.group(2) * 2
        content = match.group(3)
        if delimiter in content or content == match.group(2):
            continue
        start, end = match.span(3)
        yield PatternMatch(
            Construct.BOLD,
            start - 2,
            end + 2,
            {
                "content": (start, end),
                "open": (start - 2, start),
                "close": (end, end + 2),
            },
        )


def match_strikethrough(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in STRIKETHROUGH.finditer(text, *span):
        start, end = match.span()
        yield PatternMatch(
            Construct.STRIKETHROUGH,
            start,
            end,
            {
                "content": (start + 2, end - 2),
                "open": (start, start + 2),
                "close": (end - 2, end),
            },
        )


def match_hashtags(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in HASHTAG.finditer(text, *span):
        if match.group("tag").isdigit():
            continue
        yield PatternMatch(
            Construct.HASHTAG,
            match.start(),
            match.end(),
            {"tag": match.span("tag")},
        )


def match_code_spans(text: str, span: TextRange) -> Iterator[PatternMatch]:
    for match in CODE_SPAN.finditer(text, *span):
        open_start, open_end = match.span("open")
        width = open_end - open_start
        yield PatternMatch(
            Construct.CODE_SPAN,
            match.start(),
            match.end(),
            {
                "open": (open_start, open_end),
                "content": match.span("content"),
                "close": (match.end() - width, match.end()),
            },
        )


# Load-bearing order: later constructs style on top of earlier ones.
PATTERN_ORDER: Tuple[Construct, ...] = (
    Construct.SETEXT_HEADER,
    Construct.ATX_HEADER,
    Construct.LIST,
    Construct.BLOCKQUOTE,
    Construct.AUTOLINK,
    Construct.INLINE_LINK,
    Construct.ITALIC,
    Construct.BOLD,
    Construct.STRIKETHROUGH,
    Construct.HASHTAG,
    Construct.CODE_SPAN,
)

MATCHERS: Dict[Construct, Matcher] = {
    Construct.SETEXT_HEADER: match_setext_headers,
    Construct.ATX_HEADER: match_atx_headers,
    Construct.LIST: match_lists,
    Construct.BLOCKQUOTE: match_blockquotes,
    Construct.AUTOLINK: match_autolinks,
    Construct.INLINE_LINK: match_inline_links,
    Construct.ITALIC: match_italic,
    Construct.BOLD: match_bold,
    Construct.STRIKETHROUGH: match_strikethrough,
    Construct.HASHTAG: match_hashtags,
    Construct.CODE_SPAN: match_code_spans,
}


def find_matches(
    construct: Construct, text: str, span: Optional[TextRange] = None
) -> list[PatternMatch]:
    """Run one construct's matcher over ``span`` (whole text by default)."""

    return list(MATCHERS[construct](text, span or (0, len(text))))


def setext_underline_level(line: str) -> Optional[int]:
    """1 for an ``===`` underline, 2 for ``---``, ``None`` otherwise."""

    match = SETEXT_UNDERLINE.match(line)
    if match is None:
        return None
    return 1 if match.group("marker").startswith("=") else 2


__all__ = [
    "FENCE",
    "MATCHERS",
    "Matcher",
    "PATTERN_ORDER",
    "find_matches",
    "setext_underline_level",
]
