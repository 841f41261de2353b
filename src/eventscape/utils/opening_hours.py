"""Opening-hours matching used to filter planner candidates by start time.

Every ambiguous case resolves to "open": leaving a venue that is actually open
out of a day plan is worse than occasionally suggesting one that is closed.

Resolution order:
    1. no hours data at all            -> open
    2. structured entry for the weekday -> closed flag / open-close window
    3. free-text hours                 -> 24/7, "closed", explicit time ranges
    4. free text without any range     -> default 06:00-23:00 window
"""

import logging
import re
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_OPEN_MINUTES = 6 * 60
DEFAULT_CLOSE_MINUTES = 23 * 60

_CLOCK_PATTERN = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\s*$", re.IGNORECASE)

# "9am-10pm", "09:00 - 22:00", "7:30pm – 12:00am"
TIME_RANGE_PATTERN = re.compile(
    r"(?<!\d)(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\s*[-–—]\s*(\d{1,2})(?::(\d{2}))?\s*(am|pm)?(?!\d)",
    re.IGNORECASE,
)


def to_minutes(hour: int, minute: int = 0, period: str | None = None) -> int:
    """
    Convert a clock reading to minutes since midnight.

    Args:
        hour: Hour as written (0-24, or 1-12 with a period)
        minute: Minutes past the hour
        period: "am", "pm" or None for 24-hour readings

    Returns:
        Minutes since midnight
    """
    period = period.lower() if period else None
    if period == "pm" and hour != 12:
        hour += 12
    elif period == "am" and hour == 12:
        hour = 0
    return hour * 60 + minute


def parse_clock(value: str) -> int:
    """
    Parse "HH:MM", "9am" or "7:30 pm" into minutes since midnight.

    Raises:
        ValueError: if the value is not a recognisable clock reading
    """
    match = _CLOCK_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Unrecognised time: {value!r}")

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if hour > 24 or minute > 59:
        raise ValueError(f"Time out of range: {value!r}")

    return to_minutes(hour, minute, match.group(3))


def in_window(candidate: int, open_minutes: int, close_minutes: int) -> bool:
    """Check a minute-of-day against an open/close window that may span midnight."""
    if close_minutes < open_minutes:
        return candidate >= open_minutes or candidate <= close_minutes
    return open_minutes <= candidate <= close_minutes


def find_day_entry(
    entries: Iterable[Mapping[str, Any]], weekday: str
) -> Mapping[str, Any] | None:
    """
    Find the structured entry for ``weekday``.

    Day names compare case-insensitively; abbreviations such as "Sat" or
    "Thurs" match the full weekday name.
    """
    weekday = weekday.lower()
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        day = str(entry.get("day") or "").strip().lower()
        if not day:
            continue
        if day == weekday or (len(day) >= 3 and weekday.startswith(day)):
            return entry
    return None


def match_structured_entry(entry: Mapping[str, Any], candidate: int) -> bool | None:
    """
    Evaluate one structured opening-hours entry.

    Returns:
        False if the day is marked closed, the window result if open/close
        times are usable, or None when the entry carries neither.
    """
    if entry.get("closed"):
        return False

    open_value = entry.get("open")
    close_value = entry.get("close")
    if not open_value or not close_value:
        return None

    try:
        open_minutes = parse_clock(str(open_value))
        close_minutes = parse_clock(str(close_value))
    except ValueError:
        logger.debug(f"Unparseable structured hours entry: {dict(entry)}")
        return None

    return in_window(candidate, open_minutes, close_minutes)


def match_hours_text(text: str, candidate: int) -> bool:
    """
    Evaluate a free-text opening-hours description such as
    "Mon - Fri: 10:00am - 6:00pm; Sat - Sun: 9:00am - 9:00pm".
    """
    lowered = text.lower()

    if "24/7" in lowered or "24 hours" in lowered:
        return True

    if "closed" in lowered:
        return False

    ranges = list(TIME_RANGE_PATTERN.finditer(text))
    if ranges:
        for match in ranges:
            start_hour, start_min, start_period, end_hour, end_min, end_period = match.groups()
            open_minutes = to_minutes(int(start_hour), int(start_min or 0), start_period)
            close_minutes = to_minutes(int(end_hour), int(end_min or 0), end_period)
            if in_window(candidate, open_minutes, close_minutes):
                return True
        return False

    # No recognisable range: assume ordinary business hours
    return DEFAULT_OPEN_MINUTES <= candidate <= DEFAULT_CLOSE_MINUTES


def weekday_name(day: date | str) -> str:
    """Return the English weekday name for a date or ISO date string."""
    if isinstance(day, str):
        day = date.fromisoformat(day)
    return day.strftime("%A")


def is_open_at(event: Any, start_time: str, day: date | str) -> bool:
    """
    Decide whether ``event`` is open at ``start_time`` on ``day``.

    Args:
        event: Object exposing ``opening_hours`` (free text) and
            ``opening_hours_structured`` (list of day/open/close/closed dicts)
        start_time: Candidate start time, "HH:MM"
        day: Candidate date, as a date or ISO string

    Returns:
        True if the event should be considered open
    """
    hours_text = getattr(event, "opening_hours", None)
    structured = getattr(event, "opening_hours_structured", None)

    if not hours_text and not structured:
        return True

    try:
        candidate = parse_clock(start_time)
        weekday = weekday_name(day)
    except ValueError as e:
        logger.warning(f"Cannot evaluate opening hours ({e}); assuming open")
        return True

    if structured and isinstance(structured, list):
        entry = find_day_entry(structured, weekday)
        if entry is not None:
            result = match_structured_entry(entry, candidate)
            if result is not None:
                return result

    if hours_text:
        return match_hours_text(hours_text, candidate)

    return True
