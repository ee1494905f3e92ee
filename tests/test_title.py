import pytest

from verso.services.title import extract_title


class TestExtractTitle:
    @pytest.mark.parametrize(
        "text, title",
        [
            ("Take bins out every day at 7am starting tomorrow", "Take bins out"),
            ("Call mum every Sunday at 3pm", "Call mum"),
            ("Water plants every 3 days at 8am", "Water plants"),
            ("Dentist tomorrow at 2:30pm urgent", "Dentist"),
            ("dentist appointment on march 15 at 2:30pm", "Dentist appointment"),
            ("pay rent monthly on the 1st at 9am", "Pay rent"),
            ("team standup every weekday at 9:15am", "Team standup"),
            ("Call mom Friday", "Call mom"),
            ("review budget next week", "Review budget"),
            ("remind me in 2 hours to stretch", "Remind me to stretch"),
            ("take meds at noon", "Take meds"),
            ("Lunch with Sam at 12:30", "Lunch with Sam"),
            ("gym 6pm this evening", "Gym"),
            ("Pay bills, not urgent", "Pay bills"),
            ("buy milk", "Buy milk"),
        ],
    )
    def test_strips_scheduling_phrases(self, text, title):
        assert extract_title(text) == title

    def test_pure_noise_gives_empty_title(self):
        assert extract_title("every day at 7am") == ""
        assert extract_title("tomorrow at 9am, urgent") == ""

    def test_dangling_prepositions_removed(self):
        assert extract_title("Buy milk at") == "Buy milk"
        assert extract_title("finish report by 5pm") == "Finish report"
        assert extract_title("submit form starting") == "Submit form"

    def test_every_other_weekday_leaves_no_fragment(self):
        assert extract_title("Meeting every other Tuesday") == "Meeting"
        assert extract_title("Meeting every other Tuesday at 10am") == "Meeting"

    def test_edge_punctuation_removed(self):
        assert extract_title("- call dentist, tomorrow") == "Call dentist"
        assert extract_title("Call dentist — tomorrow") == "Call dentist"

    def test_keeps_place_after_at(self):
        assert extract_title("Dinner at Everyman tomorrow") == "Dinner at Everyman"

    def test_keeps_implausible_numeric_dates(self):
        assert extract_title("Fix 24/7 monitoring") == "Fix 24/7 monitoring"

    @pytest.mark.parametrize(
        "text",
        [
            "Take bins out every day at 7am starting tomorrow",
            "Buy milk at, by",
            "at tomorrow 7pm call",
            "  - important: email Jo every other week from tomorrow -- ",
            "every 7pm day check",
            "",
        ],
    )
    def test_idempotent(self, text):
        once = extract_title(text)
        assert extract_title(once) == once

    def test_recurrence_embedding_date_phrase(self):
        # "every Monday" is a recurrence; the weekday must not survive on its own
        assert extract_title("standup every Monday at 10am") == "Standup"
