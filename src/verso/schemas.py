import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from verso.services.nlp import ParsedReminder
from verso.services.priority import Priority
from verso.services.recurrence import RecurrenceKind, RecurrenceMatch


def generate_id() -> str:
    return str(uuid.uuid4())


class SnoozePreset(BaseModel):
    id: str
    label: str
    minutes: int = Field(gt=0)


DEFAULT_SNOOZE_PRESETS: tuple[SnoozePreset, ...] = (
    SnoozePreset(id="5min", label="5 minutes", minutes=5),
    SnoozePreset(id="15min", label="15 minutes", minutes=15),
    SnoozePreset(id="30min", label="30 minutes", minutes=30),
    SnoozePreset(id="1hr", label="1 hour", minutes=60),
    SnoozePreset(id="3hr", label="3 hours", minutes=180),
    SnoozePreset(id="tomorrow", label="Tomorrow", minutes=1440),
)


class RecurrenceRule(BaseModel):
    type: RecurrenceKind
    interval: int = Field(default=1, ge=1)
    days_of_week: list[int] | None = None  # 0-6, 0 = Sunday
    day_of_month: int | None = Field(default=None, ge=1, le=31)
    end_date: datetime | None = None
    repeat_count: int | None = Field(default=None, ge=1)

    @classmethod
    def from_match(cls, match: RecurrenceMatch) -> "RecurrenceRule":
        return cls(type=match.kind, interval=match.interval)


class Reminder(BaseModel):
    """The record handed to storage and the notification scheduler."""

    id: str = Field(default_factory=generate_id)
    title: str = Field(min_length=1)
    notes: str | None = None
    remind_at: datetime
    is_completed: bool = False
    completed_at: datetime | None = None
    recurrence: RecurrenceRule | None = None
    snooze_presets: list[SnoozePreset] = Field(
        default_factory=lambda: [preset.model_copy() for preset in DEFAULT_SNOOZE_PRESETS]
    )
    snoozed_until: datetime | None = None
    priority: Priority = Priority.MEDIUM
    tags: list[str] = Field(default_factory=list)
    notification_id: str | None = None
    sync_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    device_id: str | None = None

    @classmethod
    def from_parsed(cls, parsed: ParsedReminder, notes: str | None = None) -> "Reminder":
        """Build the record saved when the user confirms a parsed preview."""
        return cls(
            title=parsed.title,
            notes=notes,
            remind_at=parsed.datetime,
            recurrence=RecurrenceRule.from_match(parsed.recurrence) if parsed.recurrence else None,
            priority=parsed.priority,
        )


class RecurrencePreset(BaseModel):
    """A saved custom repeat such as "Every 3 days", ranked by usage."""

    id: str = Field(default_factory=generate_id)
    label: str
    type: RecurrenceKind
    interval: int = Field(ge=1)
    usage_count: int = Field(default=1, ge=0)

    @classmethod
    def from_match(cls, match: RecurrenceMatch) -> "RecurrencePreset":
        return cls(label=match.label, type=match.kind, interval=match.interval)

    def matches(self, match: RecurrenceMatch) -> bool:
        return self.type == match.kind and self.interval == match.interval


def record_recurrence_preset(
    presets: list[RecurrencePreset],
    match: RecurrenceMatch,
) -> list[RecurrencePreset]:
    """Return presets updated for a saved reminder using match.

    Only multi-interval repeats become presets; plain daily/weekly/... are
    built-in choices. An existing preset has its usage count bumped, otherwise
    a new one is appended. The input list is not modified.
    """
    if match.interval <= 1:
        return list(presets)

    updated: list[RecurrencePreset] = []
    found = False
    for preset in presets:
        if not found and preset.matches(match):
            preset = preset.model_copy(update={"usage_count": preset.usage_count + 1})
            found = True
        updated.append(preset)

    if not found:
        updated.append(RecurrencePreset.from_match(match))
    return updated
