"""Link target resolution for autolinks, inline links and tags."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote, urlsplit

from markdown_engine.buffer import TextRange

TAG_SCHEME = "tag"

AUTOLINK_TRAILING = frozenset("!?;:.,_")

# RFC 3986 characters allowed in a fragment / a path segment.
URL_FRAGMENT_SAFE = "!$&'()*+,;=:@/?-._~%"
URL_PATH_SAFE = "!$&'()*+,;=:@/-._~"

_URL_CHARACTERS = re.compile(r"[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+")


def trim_autolink(text: str, span: TextRange) -> TextRange:
    """Drop trailing punctuation and enclosing parentheses from an autolink."""

    start, end = span
    if end > start and text[end - 1] in AUTOLINK_TRAILING:
        end -= 1
    if end > start and text[start] == "(":
        start += 1
    target = text[start:end]
    if target.endswith(")") and target.count(")") > target.count("("):
        end -= 1
    return (start, end)


def resolve_link_target(raw: str) -> str:
    """Return ``raw`` when it is a well-formed URL, else a percent-encoded copy."""

    if _URL_CHARACTERS.fullmatch(raw):
        try:
            urlsplit(raw)
        except ValueError:
            pass
        else:
            return raw
    return quote(raw, safe=URL_FRAGMENT_SAFE)


def tag_link(raw: str) -> Optional[str]:
    """Build the ``tag://`` URI for a ``#tag`` token, ``None`` when empty."""

    name = raw.replace("#", "").replace("\n", "").strip()
    if not name:
        return None
    return f"{TAG_SCHEME}://{quote(name, safe=URL_PATH_SAFE)}"


__all__ = [
    "AUTOLINK_TRAILING",
    "TAG_SCHEME",
    "resolve_link_target",
    "tag_link",
    "trim_autolink",
]
