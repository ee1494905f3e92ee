"""Tests for the reminder parser and its summary formatter."""

import logging
from datetime import datetime, timedelta

import pytest
import pytz

from verso.services.nlp import (
    ParsedReminder,
    ReminderParser,
    format_parsed_summary,
    get_parser,
    parse_natural_language,
    reset_parser,
)
from verso.services.priority import Priority
from verso.services.recurrence import RecurrenceKind, RecurrenceMatch

# Monday
REFERENCE = datetime(2024, 1, 1, 8, 0)


class TestParseNaturalLanguage:
    def setup_method(self):
        self.parser = ReminderParser(timezone="UTC")

    def test_bins_every_day_starting_tomorrow(self):
        result = self.parser.parse("Take bins out every day at 7am starting tomorrow", REFERENCE)
        assert result.title == "Take bins out"
        assert result.recurrence == RecurrenceMatch(RecurrenceKind.DAILY, 1)
        assert result.confidence >= 0.9
        assert result.datetime.hour == 7
        assert result.datetime.minute == 0
        assert result.datetime == datetime(2024, 1, 2, 7, 0)

    def test_weekly_on_sunday(self):
        result = self.parser.parse("Call mum every Sunday at 3pm", REFERENCE)
        assert result.title == "Call mum"
        assert result.recurrence == RecurrenceMatch(RecurrenceKind.WEEKLY, 1)
        assert result.datetime == datetime(2024, 1, 7, 15, 0)

    def test_every_n_days(self):
        result = self.parser.parse("Water plants every 3 days at 8am", REFERENCE)
        assert result.recurrence == RecurrenceMatch(RecurrenceKind.DAILY, 3)
        assert result.title == "Water plants"

    def test_urgent_dentist(self):
        result = self.parser.parse("Dentist tomorrow at 2:30pm urgent", REFERENCE)
        assert result.priority == Priority.HIGH
        assert result.title == "Dentist"
        assert result.datetime == datetime(2024, 1, 2, 14, 30)
        assert result.recurrence is None
        assert result.confidence == 0.9

    def test_default_time_fallback(self):
        result = self.parser.parse("buy milk", REFERENCE)
        assert result.title == "Buy milk"
        assert result.datetime == REFERENCE + timedelta(hours=1)
        assert result.confidence == 0.3
        assert result.priority == Priority.MEDIUM
        assert result.recurrence is None

    def test_date_only_confidence(self):
        result = self.parser.parse("Dentist tomorrow", REFERENCE)
        assert result.confidence == 0.8
        assert result.datetime == datetime(2024, 1, 2, 8, 0)

    def test_recurrence_bonus_without_datetime(self):
        result = self.parser.parse("stretch daily", REFERENCE)
        assert result.confidence == 0.4

    def test_recurrence_bonus_is_capped(self):
        result = self.parser.parse("meds every day at 9pm", REFERENCE)
        assert result.confidence == 1.0

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_input_is_rejected(self, text):
        assert self.parser.parse(text, REFERENCE) is None

    def test_rejected_input_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="verso.services.nlp"):
            assert self.parser.parse("   ", REFERENCE) is None
            assert self.parser.parse("tomorrow, urgent", REFERENCE) is None
        messages = [record.getMessage() for record in caplog.records if record.levelno == logging.INFO]
        assert len(messages) == 2

    def test_pure_noise_is_rejected(self):
        assert self.parser.parse("every day at 7am", REFERENCE) is None
        assert self.parser.parse("tomorrow, urgent", REFERENCE) is None

    def test_surrounding_whitespace_is_trimmed(self):
        result = self.parser.parse("   buy milk tomorrow   ", REFERENCE)
        assert result.title == "Buy milk"

    def test_forward_only_resolution(self):
        reference = datetime(2024, 1, 1, 5, 0)
        result = self.parser.parse("check the oven 3am", reference)
        assert result.datetime >= reference

    @pytest.mark.parametrize(
        "text",
        [
            "every 0 days feed fish",
            "feed fish every 12 hours",
            "feed fish every other month",
            "feed fish hourly",
            "feed fish every weekday",
        ],
    )
    def test_interval_never_below_one(self, text):
        result = self.parser.parse(text, REFERENCE)
        assert result is not None
        assert result.recurrence is None or result.recurrence.interval >= 1

    def test_priority_default(self):
        assert self.parser.parse("book flights friday", REFERENCE).priority == Priority.MEDIUM

    def test_aware_reference(self):
        tz = pytz.timezone("Europe/London")
        reference = tz.localize(datetime(2024, 1, 1, 8, 0))
        result = self.parser.parse("buy milk", reference)
        assert result.datetime == reference + timedelta(hours=1)
        assert result.datetime.tzinfo is not None

    def test_default_reference_is_now(self):
        result = self.parser.parse("buy milk")
        expected = datetime.now(pytz.utc) + timedelta(hours=1)
        assert abs((result.datetime - expected).total_seconds()) < 60

    def test_to_dict(self):
        result = self.parser.parse("Water plants every 3 days at 8am", REFERENCE)
        assert result.to_dict() == {
            "title": "Water plants",
            "datetime": "2024-01-01T08:00:00",
            "recurrence": {"type": "daily", "interval": 3},
            "priority": "medium",
            "confidence": 1.0,
        }


class TestParserSingleton:
    def teardown_method(self):
        reset_parser()

    def test_get_parser_returns_same_instance(self):
        reset_parser()
        assert get_parser() is get_parser()

    def test_reset_parser(self):
        first = get_parser()
        reset_parser()
        assert get_parser() is not first

    def test_module_function(self):
        result = parse_natural_language("Call mum every Sunday at 3pm", REFERENCE)
        assert result.title == "Call mum"

    def test_lazy_service_exports(self):
        from verso import services

        assert services.parse_natural_language is parse_natural_language
        assert services.Priority is Priority
        with pytest.raises(AttributeError):
            services.does_not_exist


class TestFormatParsedSummary:
    def setup_method(self):
        self.parser = ReminderParser(timezone="UTC")

    def test_tomorrow_with_recurrence(self):
        parsed = self.parser.parse("Take bins out every day at 7am starting tomorrow", REFERENCE)
        summary = format_parsed_summary(parsed, now=REFERENCE)
        assert summary == '"Take bins out" · tomorrow at 7:00 AM · repeating daily'

    def test_today_with_interval(self):
        parsed = self.parser.parse("Water plants every 3 days at 8am", REFERENCE)
        summary = format_parsed_summary(parsed, now=REFERENCE)
        assert summary == '"Water plants" · today at 8:00 AM · repeating every 3 days'

    def test_priority_suffix(self):
        parsed = self.parser.parse("Dentist tomorrow at 2:30pm urgent", REFERENCE)
        summary = format_parsed_summary(parsed, now=REFERENCE)
        assert summary == '"Dentist" · tomorrow at 2:30 PM · (high priority)'

    def test_later_date(self):
        parsed = self.parser.parse("Call mum every Sunday at 3pm", REFERENCE)
        summary = format_parsed_summary(parsed, now=REFERENCE)
        assert summary == '"Call mum" · Sun, Jan 7 at 3:00 PM · repeating weekly'

    def test_low_priority_and_midnight(self):
        parsed = ParsedReminder(
            title="Back up photos",
            datetime=datetime(2024, 1, 3, 0, 5),
            priority=Priority.LOW,
        )
        summary = format_parsed_summary(parsed, now=REFERENCE)
        assert summary == '"Back up photos" · Wed, Jan 3 at 12:05 AM · (low priority)'

    def test_aware_now_is_converted(self):
        tz = pytz.timezone("America/New_York")
        parsed = ParsedReminder(title="Call", datetime=tz.localize(datetime(2024, 1, 1, 20, 0)))
        # 2024-01-02 00:30 UTC is still Jan 1 in New York
        now = datetime(2024, 1, 2, 0, 30, tzinfo=pytz.utc)
        assert format_parsed_summary(parsed, now=now) == '"Call" · today at 8:00 PM'

    @pytest.mark.parametrize(
        "text",
        [
            "Take bins out every day at 7am starting tomorrow",
            "buy milk",
            "pay rent monthly on the 1st at 9am",
            "renew passport 15 March 2025 asap",
            "stretch in 30 minutes whenever",
        ],
    )
    def test_round_trip_contains_quoted_title(self, text):
        parsed = self.parser.parse(text, REFERENCE)
        assert parsed is not None
        assert f'"{parsed.title}"' in format_parsed_summary(parsed)
