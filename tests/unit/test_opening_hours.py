"""Unit tests for opening-hours matching."""

from datetime import date
from types import SimpleNamespace

import pytest

from eventscape.utils.opening_hours import (
    find_day_entry,
    in_window,
    is_open_at,
    match_hours_text,
    match_structured_entry,
    parse_clock,
    to_minutes,
    weekday_name,
)

# 2025-06-02 is a Monday, 2025-06-07 a Saturday
MONDAY = date(2025, 6, 2)
SATURDAY = date(2025, 6, 7)


def venue(opening_hours: str | None = None, structured: list | None = None) -> SimpleNamespace:
    return SimpleNamespace(opening_hours=opening_hours, opening_hours_structured=structured)


# ---------------------------------------------------------------------------
# Clock parsing
# ---------------------------------------------------------------------------


class TestClockParsing:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("09:00", 540),
            ("00:00", 0),
            ("23:45", 1425),
            ("9am", 540),
            ("7:30 pm", 1170),
            ("12pm", 720),
            ("12am", 0),
            ("12:30AM", 30),
        ],
    )
    def test_parse_clock(self, value: str, expected: int) -> None:
        assert parse_clock(value) == expected

    @pytest.mark.parametrize("value", ["", "noon", "25:00", "10:75", "9.30"])
    def test_parse_clock_rejects_garbage(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_clock(value)

    def test_to_minutes_honours_period(self) -> None:
        assert to_minutes(6, 0, "pm") == 18 * 60
        assert to_minutes(6, 0, "AM") == 6 * 60
        assert to_minutes(18, 15) == 18 * 60 + 15


class TestInWindow:
    def test_plain_window_is_inclusive(self) -> None:
        assert in_window(600, 600, 1080)
        assert in_window(1080, 600, 1080)
        assert not in_window(599, 600, 1080)
        assert not in_window(1081, 600, 1080)

    def test_window_spanning_midnight(self) -> None:
        # 19:30 - 01:00
        assert in_window(23 * 60 + 45, 1170, 60)
        assert in_window(30, 1170, 60)
        assert not in_window(12 * 60, 1170, 60)


# ---------------------------------------------------------------------------
# Structured hours
# ---------------------------------------------------------------------------


class TestStructuredHours:
    def test_find_day_entry_is_case_insensitive(self) -> None:
        entries = [{"day": "MONDAY", "open": "10:00", "close": "18:00"}]
        assert find_day_entry(entries, "Monday") is entries[0]

    def test_find_day_entry_accepts_abbreviations(self) -> None:
        entries = [{"day": "Sat", "open": "09:00", "close": "21:00"}]
        assert find_day_entry(entries, "Saturday") is entries[0]
        assert find_day_entry(entries, "Sunday") is None

    def test_closed_entry(self) -> None:
        assert match_structured_entry({"day": "Monday", "closed": True}, 600) is False

    def test_entry_without_times_is_unknown(self) -> None:
        assert match_structured_entry({"day": "Monday"}, 600) is None

    @pytest.mark.parametrize(
        "start_time,expected",
        [("10:00", True), ("14:30", True), ("18:00", True), ("09:59", False), ("18:01", False)],
    )
    def test_open_close_window(self, start_time: str, expected: bool) -> None:
        event = venue(structured=[{"day": "Monday", "open": "10:00", "close": "18:00"}])
        assert is_open_at(event, start_time, MONDAY) is expected

    @pytest.mark.parametrize(
        "start_time,expected", [("23:45", True), ("00:30", True), ("12:00", False)]
    )
    def test_window_spanning_midnight(self, start_time: str, expected: bool) -> None:
        event = venue(structured=[{"day": "Monday", "open": "19:30", "close": "01:00"}])
        assert is_open_at(event, start_time, MONDAY) is expected

    @pytest.mark.parametrize(
        "start_time,expected", [("23:45", True), ("12:00", False), ("00:30", False)]
    )
    def test_window_closing_at_midnight(self, start_time: str, expected: bool) -> None:
        # 00:30 is past a 00:00 close
        event = venue(structured=[{"day": "Monday", "open": "19:30", "close": "00:00"}])
        assert is_open_at(event, start_time, MONDAY) is expected

    def test_closed_day(self) -> None:
        event = venue(structured=[{"day": "Monday", "closed": True}])
        assert is_open_at(event, "12:00", MONDAY) is False

    def test_missing_weekday_falls_back_to_text(self) -> None:
        event = venue(
            opening_hours="10:00am - 6:00pm",
            structured=[{"day": "Saturday", "open": "09:00", "close": "12:00"}],
        )
        assert is_open_at(event, "17:00", MONDAY) is True
        assert is_open_at(event, "19:00", MONDAY) is False

    def test_missing_weekday_without_text_is_open(self) -> None:
        event = venue(structured=[{"day": "Saturday", "open": "09:00", "close": "12:00"}])
        assert is_open_at(event, "03:00", MONDAY) is True


# ---------------------------------------------------------------------------
# Free-text hours
# ---------------------------------------------------------------------------


class TestHoursText:
    @pytest.mark.parametrize("text", ["Open 24/7", "24 hours daily"])
    def test_always_open(self, text: str) -> None:
        assert match_hours_text(text, 3 * 60) is True

    def test_closed_text(self) -> None:
        assert match_hours_text("Temporarily closed", 12 * 60) is False

    def test_single_range(self) -> None:
        assert match_hours_text("9:00am - 9:00pm", 20 * 60) is True
        assert match_hours_text("9:00am - 9:00pm", 22 * 60) is False

    def test_multiple_ranges(self) -> None:
        text = "Mon - Fri: 10:00am - 6:00pm; Sat - Sun: 7:30pm - 11:00pm"
        assert match_hours_text(text, 11 * 60) is True
        assert match_hours_text(text, 20 * 60) is True
        assert match_hours_text(text, 19 * 60) is False

    def test_range_spanning_midnight(self) -> None:
        text = "Fri - Sat: 7:30pm - 1:00am"
        assert match_hours_text(text, 30) is True
        assert match_hours_text(text, 12 * 60) is False

    def test_twenty_four_hour_ranges(self) -> None:
        assert match_hours_text("10:00 - 22:00", 21 * 60) is True

    def test_no_range_uses_default_window(self) -> None:
        assert match_hours_text("Varies by season", 12 * 60) is True
        assert match_hours_text("Varies by season", 5 * 60) is False
        assert match_hours_text("Varies by season", 23 * 60 + 30) is False


# ---------------------------------------------------------------------------
# is_open_at defaults
# ---------------------------------------------------------------------------


class TestIsOpenAtDefaults:
    @pytest.mark.parametrize("start_time", ["00:00", "04:15", "12:00", "23:59"])
    def test_no_data_is_always_open(self, start_time: str) -> None:
        assert is_open_at(venue(), start_time, SATURDAY) is True

    def test_accepts_iso_date_string(self) -> None:
        event = venue(structured=[{"day": "Saturday", "closed": True}])
        assert is_open_at(event, "12:00", "2025-06-07") is False

    def test_bad_start_time_assumes_open(self) -> None:
        event = venue(opening_hours="9:00am - 5:00pm")
        assert is_open_at(event, "whenever", MONDAY) is True

    def test_weekday_name(self) -> None:
        assert weekday_name(MONDAY) == "Monday"
        assert weekday_name("2025-06-07") == "Saturday"
