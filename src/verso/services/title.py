"""Title cleanup for reminder text.

Strips date/time, recurrence and priority phrases so only the actionable part
is left: "take bins out every day at 7am starting tomorrow" -> "Take bins out".

The phrase set here is regex based and independent of the date/time
extractor, so on unusual input the two can disagree about span boundaries.
Stripping runs in a fixed order because later steps assume the earlier noise
is already gone:

1. recurrence phrases
2. "at 7pm", "starting tomorrow", "from next week"
3. priority phrases
4. relative and calendar date phrases
5. bare clock times
6. dangling trailing prepositions and a leftover "every (other)"
7. whitespace, edge punctuation and capitalisation
"""

import re

from verso.services.datetime_extractor import WEEKDAY_NAMES, DateTimeExtractor
from verso.services.priority import strip_priority
from verso.services.recurrence import strip_recurrence

TIME_PHRASES = re.compile(
    r"\b(?:at\s+\d{1,2}(?::\d{2})?\s*(?:am|pm)?"
    r"|starting\s+(?:today|tomorrow|next\s+\w+|on\s+\w+)"
    r"|from\s+(?:today|tomorrow|next\s+\w+))\b",
    re.IGNORECASE,
)

RELATIVE_DAY_PHRASES = re.compile(
    r"\b(?:tomorrow|today|tonight"
    rf"|next\s+(?:week|month|year|{WEEKDAY_NAMES})"
    rf"|(?:on|this)\s+(?:{WEEKDAY_NAMES})"
    r"|this\s+(?:morning|afternoon|evening|weekend)"
    rf"|{WEEKDAY_NAMES})\b",
    re.IGNORECASE,
)


def _on_prefixed(pattern: re.Pattern[str]) -> re.Pattern[str]:
    return re.compile(rf"(?:\bon\s+)?(?:{pattern.pattern})", re.IGNORECASE)


DATE_PHRASES: tuple[re.Pattern[str], ...] = (
    _on_prefixed(DateTimeExtractor.MONTH_DAY_PATTERN),
    _on_prefixed(DateTimeExtractor.DAY_MONTH_PATTERN),
    _on_prefixed(DateTimeExtractor.ISO_DATE_PATTERN),
    # Only plausible month/day pairs, so "24/7" survives
    re.compile(
        r"(?:\bon\s+)?\b(?:1[0-2]|0?[1-9])/(?:3[01]|[12]\d|0?[1-9])(?:/(?:\d{4}|\d{2}))?\b",
        re.IGNORECASE,
    ),
    _on_prefixed(DateTimeExtractor.ORDINAL_DAY_PATTERN),
    DateTimeExtractor.OFFSET_PATTERN,
    re.compile(r"(?:\bat\s+)?\b(?:noon|midnight)\b", re.IGNORECASE),
)

CLOCK_TIMES = (
    re.compile(r"\b\d{1,2}(?::\d{2})?\s*(?:am|pm)\b", re.IGNORECASE),
    re.compile(r"\b\d{1,2}:\d{2}(?!\d)"),
)

TRAILING_CONNECTIVES = re.compile(
    r"(?:\s*\b(?:at|by|before|after|around|from|starting|beginning|every(?:\s+other)?)\b)+[\s,]*$",
    re.IGNORECASE,
)

EDGE_PUNCTUATION = re.compile(r"^[\s,\-–—]+|[\s,\-–—]+$")


def _strip_once(text: str) -> str:
    title = strip_recurrence(text)
    title = TIME_PHRASES.sub("", title)
    title = strip_priority(title)
    title = RELATIVE_DAY_PHRASES.sub("", title)
    for pattern in DATE_PHRASES:
        title = pattern.sub("", title)
    for pattern in CLOCK_TIMES:
        title = pattern.sub("", title)
    title = TRAILING_CONNECTIVES.sub("", title)

    title = re.sub(r"\s+", " ", title).strip()
    title = EDGE_PUNCTUATION.sub("", title).strip()
    if title:
        title = title[0].upper() + title[1:]
    return title


def extract_title(text: str) -> str:
    """Return the actionable title left after stripping scheduling phrases.

    The result may be empty when the text was nothing but scheduling noise.
    Stripping repeats until nothing changes, so the result is stable under
    a second call.
    """
    title = _strip_once(text)
    while True:
        again = _strip_once(title)
        if again == title:
            return title
        title = again
