"""Pattern library: one compiled matcher per markdown construct."""

from .library import (
    FENCE,
    MATCHERS,
    PATTERN_ORDER,
    Matcher,
    find_matches,
    setext_underline_level,
)
from .models import Construct, PatternMatch

__all__ = [
    "Construct",
    "FENCE",
    "MATCHERS",
    "Matcher",
    "PATTERN_ORDER",
    "PatternMatch",
    "find_matches",
    "setext_underline_level",
]
