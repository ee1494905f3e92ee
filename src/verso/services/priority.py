"""Priority keyword detection for reminder text."""

import re
from enum import Enum


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


HIGH_PRIORITY_KEYWORDS = ("urgent", "high priority", "important", "asap", "critical")
LOW_PRIORITY_KEYWORDS = ("low priority", "not urgent", "whenever", "no rush")


def _keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern[str]:
    # Longest first so "not urgent" is consumed whole rather than as "urgent"
    alternatives = sorted(keywords, key=len, reverse=True)
    joined = "|".join(r"\s*".join(re.escape(word) for word in keyword.split()) for keyword in alternatives)
    return re.compile(rf"\b(?:{joined})\b", re.IGNORECASE)


# High is checked first: when both sets match, high wins.
PRIORITY_RULES: tuple[tuple[re.Pattern[str], Priority], ...] = (
    (_keyword_pattern(HIGH_PRIORITY_KEYWORDS), Priority.HIGH),
    (_keyword_pattern(LOW_PRIORITY_KEYWORDS), Priority.LOW),
)

PRIORITY_PHRASES = _keyword_pattern(HIGH_PRIORITY_KEYWORDS + LOW_PRIORITY_KEYWORDS)


def match_priority(
    text: str,
    rules: tuple[tuple[re.Pattern[str], Priority], ...] = PRIORITY_RULES,
) -> Priority:
    """Return the priority signalled by text, medium when nothing matches."""
    for pattern, priority in rules:
        if pattern.search(text):
            return priority
    return Priority.MEDIUM


def strip_priority(text: str) -> str:
    """Remove every priority phrase from text."""
    return PRIORITY_PHRASES.sub("", text)
