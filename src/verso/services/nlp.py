"""Natural-language reminder parsing.

Turns free text into a structured reminder:

    "take bins out every day at 7am starting tomorrow"
    -> title="Take bins out", datetime=tomorrow 07:00, recurrence=daily/1,
       priority=medium, confidence=1.0

Every parse is a pure function of the text and the reference instant. When
no reference is given, "now" in the configured user timezone is used.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from verso.config import settings
from verso.services.datetime_extractor import DateTimeExtractor, shift
from verso.services.priority import Priority, match_priority
from verso.services.recurrence import RecurrenceMatch, match_recurrence
from verso.services.title import extract_title

logger = logging.getLogger(__name__)

# Confidence is a heuristic quality score, not a probability
CONFIDENCE_WITH_TIME = 0.9
CONFIDENCE_DATE_ONLY = 0.8
CONFIDENCE_NO_DATETIME = 0.3
RECURRENCE_BONUS = 0.1

SUMMARY_SEPARATOR = " · "


@dataclass(frozen=True)
class ParsedReminder:
    """Structured result of parsing one piece of reminder text."""

    title: str
    datetime: datetime
    recurrence: RecurrenceMatch | None = None
    priority: Priority = Priority.MEDIUM
    confidence: float = CONFIDENCE_NO_DATETIME

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "datetime": self.datetime.isoformat(),
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "priority": self.priority.value,
            "confidence": self.confidence,
        }


class ReminderParser:
    """Parses reminder text into a ParsedReminder.

    Pipeline:
    1. date/time extraction (falls back to reference + default offset)
    2. recurrence matching
    3. priority matching
    4. title cleanup; an empty title rejects the parse
    """

    def __init__(self, timezone: str | None = None, extractor: DateTimeExtractor | None = None):
        self.extractor = extractor or DateTimeExtractor(timezone)
        self.timezone = self.extractor.timezone
        self.default_offset = timedelta(minutes=settings.default_offset_minutes)

    def parse(self, text: str, reference: datetime | None = None) -> ParsedReminder | None:
        """Parse text into a reminder.

        Args:
            text: Raw reminder text
            reference: Instant relative phrases resolve against. Defaults to now.

        Returns:
            ParsedReminder, or None when the text is blank or nothing
            actionable is left once scheduling phrases are removed
        """
        if not text or not text.strip():
            logger.info("Rejected blank reminder text")
            return None

        text = text.strip()
        if reference is None:
            reference = datetime.now(self.timezone)

        extracted = self.extractor.extract(text, reference)
        if extracted is None:
            when = shift(reference, self.default_offset)
            confidence = CONFIDENCE_NO_DATETIME
        else:
            when = extracted.instant
            confidence = CONFIDENCE_WITH_TIME if extracted.has_time else CONFIDENCE_DATE_ONLY

        recurrence = match_recurrence(text)
        if recurrence is not None:
            confidence = min(round(confidence + RECURRENCE_BONUS, 2), 1.0)

        priority = match_priority(text)
        title = extract_title(text)

        if not title:
            logger.info(f"No actionable title left in {text!r}")
            return None

        parsed = ParsedReminder(
            title=title,
            datetime=when,
            recurrence=recurrence,
            priority=priority,
            confidence=confidence,
        )
        logger.debug(
            f"Parsed {text!r}: title={title!r} datetime={when.isoformat()} "
            f"matched={extracted.matched_text if extracted else None!r} "
            f"recurrence={recurrence} priority={priority.value} confidence={confidence}"
        )
        return parsed


def _format_time(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def _format_day(moment: datetime, today: date) -> str:
    day = moment.date()
    if day == today:
        return "today"
    if day == today + timedelta(days=1):
        return "tomorrow"
    return f"{day.strftime('%a, %b')} {day.day}"


def format_parsed_summary(parsed: ParsedReminder, now: datetime | None = None) -> str:
    """Render a parsed reminder as a one-line preview.

    Example: '"Take bins out" · tomorrow at 7:00 AM · repeating daily'

    Args:
        parsed: Result of parse_natural_language
        now: Instant deciding the today/tomorrow wording. Defaults to now.
    """
    moment = parsed.datetime
    if now is None:
        now = datetime.now(moment.tzinfo)
    elif moment.tzinfo is not None and now.tzinfo is not None:
        now = now.astimezone(moment.tzinfo)

    parts = [f'"{parsed.title}"', f"{_format_day(moment, now.date())} at {_format_time(moment)}"]

    if parsed.recurrence is not None:
        if parsed.recurrence.interval == 1:
            parts.append(f"repeating {parsed.recurrence.kind.value}")
        else:
            parts.append(f"repeating every {parsed.recurrence.interval} {parsed.recurrence.unit_plural}")

    if parsed.priority is not Priority.MEDIUM:
        parts.append(f"({parsed.priority.value} priority)")

    return SUMMARY_SEPARATOR.join(parts)


# Module-level singleton
_parser: ReminderParser | None = None


def get_parser(timezone: str | None = None) -> ReminderParser:
    """Get the shared ReminderParser. timezone only applies on first call."""
    global _parser
    if _parser is None:
        _parser = ReminderParser(timezone)
    return _parser


def reset_parser() -> None:
    """Reset the singleton (useful for testing)."""
    global _parser
    _parser = None


def parse_natural_language(text: str, reference: datetime | None = None) -> ParsedReminder | None:
    """Parse reminder text with the shared parser."""
    return get_parser().parse(text, reference)
