"""Anchor date/time extraction for reminder text.

Finds the earliest date phrase and the earliest clock time in a piece of text
and combines them into a concrete instant relative to a reference datetime.

Examples (reference Monday 2024-01-01 08:00):
    "dentist tomorrow at 2:30pm"   -> 2024-01-02 14:30
    "call mum every sunday at 3pm" -> 2024-01-07 15:00
    "meds at 7am"                  -> 2024-01-02 07:00 (7am today already passed)
    "pay rent on the 1st"          -> 2024-02-01 09:00
"""

import calendar
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo

import pytz

from verso.config import settings

logger = logging.getLogger(__name__)

WEEKDAYS: dict[str, int] = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

MONTHS: dict[str, int] = {
    "january": 1,
    "jan": 1,
    "february": 2,
    "feb": 2,
    "march": 3,
    "mar": 3,
    "april": 4,
    "apr": 4,
    "may": 5,
    "june": 6,
    "jun": 6,
    "july": 7,
    "jul": 7,
    "august": 8,
    "aug": 8,
    "september": 9,
    "sept": 9,
    "sep": 9,
    "october": 10,
    "oct": 10,
    "november": 11,
    "nov": 11,
    "december": 12,
    "dec": 12,
}

WEEKDAY_NAMES = "|".join(WEEKDAYS)
# Longest first so "sept" wins over "sep"
MONTH_NAMES = "|".join(sorted(MONTHS, key=len, reverse=True))


@dataclass(frozen=True)
class ExtractedDateTime:
    """A concrete instant found in text, with the parts that were stated."""

    instant: datetime
    has_hour: bool = False
    has_minute: bool = False
    has_date: bool = False
    matched_text: str = ""

    @property
    def has_time(self) -> bool:
        return self.has_hour or self.has_minute


@dataclass(frozen=True)
class _DatePart:
    start: int
    text: str
    day: date | None = None
    default_time: time | None = None
    # Relative minute/hour offsets resolve to a full instant on their own
    fixed: datetime | None = None
    fixed_has_minute: bool = False
    # Bare hours read as pm ("tonight at 8")
    evening: bool = False


@dataclass(frozen=True)
class _TimePart:
    start: int
    text: str
    hour: int
    minute: int
    has_minute: bool = False
    meridiem: bool = False


def resolve_timezone(name: str | None = None) -> tzinfo:
    """Return the pytz timezone for name, or the configured user timezone.

    Unknown names fall back to UTC.
    """
    tz_name = name or settings.user_timezone
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone {tz_name!r}, falling back to UTC")
        return pytz.utc


def attach_timezone(moment: datetime, tz: tzinfo | None) -> datetime:
    """Attach tz to a naive wall-clock datetime.

    Naive stays naive when tz is None. pytz zones need localize() to pick the
    right UTC offset.
    """
    if tz is None:
        return moment
    localize = getattr(tz, "localize", None)
    if localize is not None:
        return localize(moment)
    return moment.replace(tzinfo=tz)


def shift(moment: datetime, delta: timedelta) -> datetime:
    """Add an absolute duration, staying correct across DST changes."""
    if moment.tzinfo is None:
        return moment + delta
    return (moment.astimezone(UTC) + delta).astimezone(moment.tzinfo)


def add_months(day: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def _to_24_hour(hour: int, meridiem: str | None) -> int | None:
    if meridiem is None:
        return hour if 0 <= hour <= 23 else None
    if not 1 <= hour <= 12:
        return None
    meridiem = meridiem.lower()
    if meridiem == "pm" and hour < 12:
        return hour + 12
    if meridiem == "am" and hour == 12:
        return 0
    return hour


class DateTimeExtractor:
    """Extracts the first date/time expression from reminder text.

    Date and time are located independently: the earliest date phrase
    supplies the day and the earliest clock time supplies the time of day.
    A date with no time gets a default time of day; a time with no date lands
    on the reference day. Whatever resolves to before the reference is pushed
    forward by exactly one day.
    """

    RELATIVE_DAY_PATTERN = re.compile(r"\b(today|tomorrow|tonight)\b", re.IGNORECASE)
    DAY_PERIOD_PATTERN = re.compile(r"\bthis\s+(morning|afternoon|evening)\b", re.IGNORECASE)
    NEXT_PERIOD_PATTERN = re.compile(r"\bnext\s+(week|month|year)\b", re.IGNORECASE)
    WEEKDAY_PATTERN = re.compile(
        rf"\b(?:(next|this|on)\s+)?({WEEKDAY_NAMES})\b", re.IGNORECASE
    )
    MONTH_DAY_PATTERN = re.compile(
        rf"\b({MONTH_NAMES})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?\b(?:,?\s+(\d{{4}})\b)?",
        re.IGNORECASE,
    )
    DAY_MONTH_PATTERN = re.compile(
        rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+(?:of\s+)?({MONTH_NAMES})\b(?:,?\s+(\d{{4}})\b)?",
        re.IGNORECASE,
    )
    ISO_DATE_PATTERN = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
    NUMERIC_DATE_PATTERN = re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{4}|\d{2}))?\b")
    ORDINAL_DAY_PATTERN = re.compile(
        rf"\bthe\s+(\d{{1,2}})(?:st|nd|rd|th)\b(?!\s+(?:of\s+)?(?:{MONTH_NAMES})\b)",
        re.IGNORECASE,
    )
    OFFSET_PATTERN = re.compile(r"\bin\s+(\d+|an?)\s+(minute|hour|day|week)s?\b", re.IGNORECASE)

    CLOCK_PATTERN = re.compile(r"\b(\d{1,2}):(\d{2})(?!\d)(?:\s*(am|pm)\b)?", re.IGNORECASE)
    MERIDIEM_PATTERN = re.compile(r"\b(\d{1,2})\s*(am|pm)\b", re.IGNORECASE)
    AT_HOUR_PATTERN = re.compile(r"\bat\s+(\d{1,2})\b(?!\s*(?:am|pm)\b|:\d|/\d)", re.IGNORECASE)
    NAMED_TIME_PATTERN = re.compile(r"\b(noon|midnight)\b", re.IGNORECASE)

    DAY_PERIOD_HOURS: dict[str, int] = {"morning": 9, "afternoon": 15, "evening": 18}
    TONIGHT_HOUR = 20

    def __init__(self, timezone: str | None = None, default_hour: int | None = None):
        self.timezone = resolve_timezone(timezone)
        self.default_hour = settings.default_hour if default_hour is None else default_hour

    def extract(self, text: str, reference: datetime | None = None) -> ExtractedDateTime | None:
        """Resolve the first date/time expression in text.

        Args:
            text: Free text such as "dentist tomorrow at 2:30pm"
            reference: Instant that relative phrases resolve against.
                Defaults to now in the configured timezone.

        Returns:
            ExtractedDateTime, or None when nothing recognisable is present
        """
        if reference is None:
            reference = datetime.now(self.timezone)

        wall = reference.replace(tzinfo=None)
        date_part = self._find_date(text, reference, wall)
        time_part = self._find_time(text)

        if date_part is None and time_part is None:
            return None

        if date_part is not None and date_part.fixed is not None:
            return ExtractedDateTime(
                instant=date_part.fixed,
                has_hour=True,
                has_minute=date_part.fixed_has_minute,
                has_date=False,
                matched_text=date_part.text,
            )

        day = date_part.day if date_part is not None else wall.date()
        if time_part is not None:
            hour = time_part.hour
            if date_part is not None and date_part.evening and not time_part.meridiem and hour < 12:
                hour += 12
            clock = time(hour, time_part.minute)
        else:
            clock = date_part.default_time

        resolved = datetime.combine(day, clock)
        instant = attach_timezone(resolved, reference.tzinfo)
        if instant < reference:
            instant = attach_timezone(resolved + timedelta(days=1), reference.tzinfo)

        parts = sorted(
            (part for part in (date_part, time_part) if part is not None),
            key=lambda part: part.start,
        )
        return ExtractedDateTime(
            instant=instant,
            has_hour=time_part is not None,
            has_minute=time_part is not None and time_part.has_minute,
            has_date=date_part is not None,
            matched_text=" ".join(part.text for part in parts),
        )

    def _find_date(self, text: str, reference: datetime, wall: datetime) -> _DatePart | None:
        resolvers: tuple[tuple[re.Pattern[str], Callable[..., _DatePart | None]], ...] = (
            (self.RELATIVE_DAY_PATTERN, self._relative_day),
            (self.DAY_PERIOD_PATTERN, self._day_period),
            (self.NEXT_PERIOD_PATTERN, self._next_period),
            (self.WEEKDAY_PATTERN, self._weekday),
            (self.MONTH_DAY_PATTERN, self._month_day),
            (self.DAY_MONTH_PATTERN, self._day_month),
            (self.ISO_DATE_PATTERN, self._iso_date),
            (self.NUMERIC_DATE_PATTERN, self._numeric_date),
            (self.ORDINAL_DAY_PATTERN, self._ordinal_day),
            (self.OFFSET_PATTERN, self._offset),
        )
        candidates: list[_DatePart] = []
        for pattern, resolve in resolvers:
            for match in pattern.finditer(text):
                part = resolve(match, reference, wall)
                if part is not None:
                    candidates.append(part)
        return min(candidates, key=lambda part: part.start, default=None)

    def _find_time(self, text: str) -> _TimePart | None:
        candidates: list[_TimePart] = []

        for match in self.CLOCK_PATTERN.finditer(text):
            hour = _to_24_hour(int(match.group(1)), match.group(3))
            minute = int(match.group(2))
            if hour is not None and minute <= 59:
                candidates.append(
                    _TimePart(
                        start=match.start(),
                        text=match.group(0),
                        hour=hour,
                        minute=minute,
                        has_minute=True,
                        meridiem=match.group(3) is not None,
                    )
                )

        for match in self.MERIDIEM_PATTERN.finditer(text):
            hour = _to_24_hour(int(match.group(1)), match.group(2))
            if hour is not None:
                candidates.append(
                    _TimePart(start=match.start(), text=match.group(0), hour=hour, minute=0, meridiem=True)
                )

        for match in self.AT_HOUR_PATTERN.finditer(text):
            hour = _to_24_hour(int(match.group(1)), None)
            if hour is not None:
                candidates.append(_TimePart(start=match.start(), text=match.group(0), hour=hour, minute=0))

        for match in self.NAMED_TIME_PATTERN.finditer(text):
            hour = 12 if match.group(1).lower() == "noon" else 0
            candidates.append(
                _TimePart(start=match.start(), text=match.group(0), hour=hour, minute=0, meridiem=True)
            )

        return min(candidates, key=lambda part: part.start, default=None)

    def _relative_day(self, match: re.Match[str], reference: datetime, wall: datetime) -> _DatePart:
        word = match.group(1).lower()
        if word == "tomorrow":
            return _DatePart(
                start=match.start(),
                text=match.group(0),
                day=wall.date() + timedelta(days=1),
                default_time=wall.time(),
            )
        if word == "tonight":
            return _DatePart(
                start=match.start(),
                text=match.group(0),
                day=wall.date(),
                default_time=time(self.TONIGHT_HOUR),
                evening=True,
            )
        return _DatePart(start=match.start(), text=match.group(0), day=wall.date(), default_time=wall.time())

    def _day_period(self, match: re.Match[str], reference: datetime, wall: datetime) -> _DatePart:
        period = match.group(1).lower()
        return _DatePart(
            start=match.start(),
            text=match.group(0),
            day=wall.date(),
            default_time=time(self.DAY_PERIOD_HOURS[period]),
            evening=period != "morning",
        )

    def _next_period(self, match: re.Match[str], reference: datetime, wall: datetime) -> _DatePart:
        unit = match.group(1).lower()
        if unit == "week":
            day = wall.date() + timedelta(weeks=1)
        elif unit == "month":
            day = add_months(wall.date(), 1)
        else:
            day = add_months(wall.date(), 12)
        return _DatePart(start=match.start(), text=match.group(0), day=day, default_time=wall.time())

    def _weekday(self, match: re.Match[str], reference: datetime, wall: datetime) -> _DatePart:
        qualifier = (match.group(1) or "").lower()
        target = WEEKDAYS[match.group(2).lower()]
        days_ahead = (target - wall.weekday()) % 7
        if qualifier == "next" and days_ahead == 0:
            days_ahead = 7
        return _DatePart(
            start=match.start(),
            text=match.group(0),
            day=wall.date() + timedelta(days=days_ahead),
            default_time=time(self.default_hour),
        )

    def _month_day(self, match: re.Match[str], reference: datetime, wall: datetime) -> _DatePart | None:
        month = MONTHS[match.group(1).lower()]
        return self._calendar_date(match, wall, month, int(match.group(2)), match.group(3))

    def _day_month(self, match: re.Match[str], reference: datetime, wall: datetime) -> _DatePart | None:
        month = MONTHS[match.group(2).lower()]
        return self._calendar_date(match, wall, month, int(match.group(1)), match.group(3))

    def _iso_date(self, match: re.Match[str], reference: datetime, wall: datetime) -> _DatePart | None:
        try:
            day = date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        except ValueError:
            return None
        return _DatePart(start=match.start(), text=match.group(0), day=day, default_time=time(self.default_hour))

    def _numeric_date(self, match: re.Match[str], reference: datetime, wall: datetime) -> _DatePart | None:
        year = match.group(3)
        if year is not None and len(year) == 2:
            year = str(2000 + int(year))
        return self._calendar_date(match, wall, int(match.group(1)), int(match.group(2)), year)

    def _calendar_date(
        self,
        match: re.Match[str],
        wall: datetime,
        month: int,
        day_of_month: int,
        year: str | None,
    ) -> _DatePart | None:
        try:
            if year is not None:
                day = date(int(year), month, day_of_month)
            else:
                day = date(wall.year, month, day_of_month)
                if day < wall.date():
                    day = date(wall.year + 1, month, day_of_month)
        except ValueError:
            return None
        return _DatePart(start=match.start(), text=match.group(0), day=day, default_time=time(self.default_hour))

    def _ordinal_day(self, match: re.Match[str], reference: datetime, wall: datetime) -> _DatePart | None:
        day_of_month = int(match.group(1))
        if not 1 <= day_of_month <= 31:
            return None

        first = wall.date().replace(day=1)
        for months_ahead in range(13):
            month_start = add_months(first, months_ahead)
            if day_of_month > calendar.monthrange(month_start.year, month_start.month)[1]:
                continue
            day = month_start.replace(day=day_of_month)
            if day >= wall.date():
                return _DatePart(
                    start=match.start(),
                    text=match.group(0),
                    day=day,
                    default_time=time(self.default_hour),
                )
        return None

    def _offset(self, match: re.Match[str], reference: datetime, wall: datetime) -> _DatePart | None:
        amount_text = match.group(1).lower()
        try:
            amount = 1 if amount_text in ("a", "an") else int(amount_text)
        except ValueError:
            return None
        if amount < 1:
            return None

        unit = match.group(2).lower()
        try:
            if unit in ("minute", "hour"):
                delta = timedelta(minutes=amount) if unit == "minute" else timedelta(hours=amount)
                return _DatePart(
                    start=match.start(),
                    text=match.group(0),
                    fixed=shift(reference, delta),
                    fixed_has_minute=unit == "minute",
                )
            days = amount * 7 if unit == "week" else amount
            day = wall.date() + timedelta(days=days)
        except OverflowError:
            # Offsets beyond the datetime range are not a usable date
            return None
        return _DatePart(start=match.start(), text=match.group(0), day=day, default_time=wall.time())


def extract_datetime(text: str, reference: datetime | None = None) -> ExtractedDateTime | None:
    """Extract the first date/time expression using the configured defaults."""
    return DateTimeExtractor().extract(text, reference)
