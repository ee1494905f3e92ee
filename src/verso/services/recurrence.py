"""Recurrence detection for reminder text.

Rules are tried in order and the first valid match wins, so specific
multi-word phrases ("every 3 days") are checked before bare keywords
("daily").

Known approximations kept on purpose:
- "every weekday" maps to daily, not Monday to Friday.
- "every morning", "every evening" and "every night" map to daily.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class RecurrenceKind(str, Enum):
    """How often a reminder repeats."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


UNIT_KINDS: dict[str, RecurrenceKind] = {
    "hour": RecurrenceKind.HOURLY,
    "day": RecurrenceKind.DAILY,
    "week": RecurrenceKind.WEEKLY,
    "month": RecurrenceKind.MONTHLY,
    "year": RecurrenceKind.YEARLY,
    "morning": RecurrenceKind.DAILY,
    "evening": RecurrenceKind.DAILY,
    "night": RecurrenceKind.DAILY,
    "weekday": RecurrenceKind.DAILY,
}

UNIT_PLURALS: dict[RecurrenceKind, str] = {
    RecurrenceKind.HOURLY: "hours",
    RecurrenceKind.DAILY: "days",
    RecurrenceKind.WEEKLY: "weeks",
    RecurrenceKind.MONTHLY: "months",
    RecurrenceKind.YEARLY: "years",
}


@dataclass(frozen=True)
class RecurrenceMatch:
    """A detected repetition: every `interval` units of `kind`."""

    kind: RecurrenceKind
    interval: int = 1

    @property
    def unit_plural(self) -> str:
        return UNIT_PLURALS[self.kind]

    @property
    def label(self) -> str:
        """Preset label, e.g. "Daily" or "Every 3 days"."""
        if self.interval == 1:
            return self.kind.value.capitalize()
        return f"Every {self.interval} {self.unit_plural}"

    def to_dict(self) -> dict:
        return {"type": self.kind.value, "interval": self.interval}


@dataclass(frozen=True)
class RecurrenceRule:
    """One entry of the recurrence table.

    `kind` and `interval` fix the result. When either is None it is read from
    the match: kind from the "unit" group, interval from the "count" group.
    """

    pattern: re.Pattern[str]
    kind: RecurrenceKind | None = None
    interval: int | None = None

    def resolve(self, match: re.Match[str]) -> RecurrenceMatch | None:
        groups = match.groupdict()

        kind = self.kind
        if kind is None:
            kind = unit_to_kind(groups.get("unit") or "")

        interval = self.interval
        if interval is None:
            try:
                interval = int(groups.get("count") or "")
            except ValueError:
                return None

        if kind is None or interval < 1:
            return None
        return RecurrenceMatch(kind=kind, interval=interval)


_WEEKDAY_NAMES = "sunday|monday|tuesday|wednesday|thursday|friday|saturday"

RECURRENCE_RULES: tuple[RecurrenceRule, ...] = (
    RecurrenceRule(
        re.compile(r"\bevery\s+other\s+(?P<unit>day|week|month|year|hour)\b", re.IGNORECASE),
        interval=2,
    ),
    RecurrenceRule(
        re.compile(r"\bevery\s+(?P<count>\d+)\s*(?P<unit>day|week|month|year|hour)s?\b", re.IGNORECASE),
    ),
    RecurrenceRule(
        re.compile(
            r"\bevery\s+(?:single\s+)?(?P<unit>day|week|month|year|hour|morning|evening|night|weekday)\b",
            re.IGNORECASE,
        ),
        interval=1,
    ),
    RecurrenceRule(re.compile(r"\bdaily\b", re.IGNORECASE), RecurrenceKind.DAILY, 1),
    RecurrenceRule(re.compile(r"\bweekly\b", re.IGNORECASE), RecurrenceKind.WEEKLY, 1),
    RecurrenceRule(re.compile(r"\bmonthly\b", re.IGNORECASE), RecurrenceKind.MONTHLY, 1),
    RecurrenceRule(re.compile(r"\byearly\b", re.IGNORECASE), RecurrenceKind.YEARLY, 1),
    RecurrenceRule(re.compile(r"\bhourly\b", re.IGNORECASE), RecurrenceKind.HOURLY, 1),
    RecurrenceRule(
        re.compile(rf"\bevery\s+(?:{_WEEKDAY_NAMES})\b", re.IGNORECASE),
        RecurrenceKind.WEEKLY,
        1,
    ),
)


def unit_to_kind(unit: str) -> RecurrenceKind | None:
    """Map a unit word ("day", "weeks", "evening") to its recurrence kind."""
    unit = unit.lower()
    if unit.endswith("s") and unit[:-1] in UNIT_KINDS:
        unit = unit[:-1]
    return UNIT_KINDS.get(unit)


def match_recurrence(
    text: str,
    rules: tuple[RecurrenceRule, ...] = RECURRENCE_RULES,
) -> RecurrenceMatch | None:
    """Find the repetition described in text, if any.

    Args:
        text: Raw reminder text
        rules: Ordered rule table; the first rule with a valid match wins

    Returns:
        RecurrenceMatch, or None when the text does not repeat
    """
    for rule in rules:
        for match in rule.pattern.finditer(text):
            result = rule.resolve(match)
            if result is not None:
                logger.debug(f"Recurrence {result.kind.value}/{result.interval} from {match.group(0)!r}")
                return result
    return None


def strip_recurrence(text: str, rules: tuple[RecurrenceRule, ...] = RECURRENCE_RULES) -> str:
    """Remove every recurrence phrase from text."""
    for rule in rules:
        text = rule.pattern.sub("", text)
    return text
