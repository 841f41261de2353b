"""Date-text normalization for extracted event dates."""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

SINGAPORE_TZ = ZoneInfo("Asia/Singapore")

ONGOING = "Ongoing"
RANGE_SEPARATOR = " - "

MIN_YEAR = 2020
MAX_YEAR = 2030

# A year-less date more than this far in the past is read as next year's date
ROLLOVER_DAYS = 30

NOW_TOKENS = frozenset({"now", "today"})
ONGOING_TOKENS = frozenset({"ongoing", "now open"})

DATE_FORMATS = (
    "%Y-%m-%d",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%a %d %b %Y",
    "%A %d %B %Y",
    "%a %d %B %Y",
    "%A %d %b %Y",
    "%d/%m/%Y",
)

_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")
_ORDINAL_PATTERN = re.compile(r"\b(\d{1,2})(st|nd|rd|th)\b", re.IGNORECASE)


def singapore_today() -> date:
    """Current date in Singapore."""
    return datetime.now(SINGAPORE_TZ).date()


def _clean(text: str) -> str:
    text = _ORDINAL_PATTERN.sub(r"\1", text)
    text = re.sub(r"\bSept\b", "Sep", text, flags=re.IGNORECASE)
    text = text.replace(",", " ")
    return re.sub(r"\s+", " ", text).strip()


def _parse(text: str) -> date | None:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def find_year(text: str) -> int | None:
    """Return the first 4-digit year in ``text``, if any."""
    match = _YEAR_PATTERN.search(text)
    return int(match.group(1)) if match else None


def format_event_date(
    text: str | None,
    today: date | None = None,
    default_year: int | None = None,
) -> str | None:
    """
    Normalize one side of an event date to an ISO date string.

    - "now"/"today" become today's date, "ongoing" becomes ``ONGOING``
    - Text without a 4-digit year gets ``default_year`` or, failing that, the
      current year, rolled forward a year if the result is more than
      ``ROLLOVER_DAYS`` in the past
    - Parsed years outside [MIN_YEAR, MAX_YEAR] are rejected

    Anything that cannot be parsed is returned as the original text.

    Examples:
        >>> format_event_date("22 May 2025")
        '2025-05-22'
        >>> format_event_date("Every Friday")
        'Every Friday'
    """
    if text is None:
        return None

    original = text.strip()
    if not original:
        return None

    today = today or singapore_today()
    token = original.lower()
    if token in NOW_TOKENS:
        return today.isoformat()
    if token in ONGOING_TOKENS:
        return ONGOING

    cleaned = _clean(original)
    has_year = find_year(cleaned) is not None
    rollover = False

    if not has_year:
        year = default_year if default_year is not None else today.year
        rollover = default_year is None
        cleaned = f"{cleaned} {year}"

    parsed = _parse(cleaned)
    if parsed is None:
        logger.debug(f"Could not parse date text {original!r}")
        return original

    if rollover and parsed < today - timedelta(days=ROLLOVER_DAYS):
        try:
            parsed = parsed.replace(year=parsed.year + 1)
        except ValueError:
            # 29 Feb has no counterpart next year
            return original

    if not MIN_YEAR <= parsed.year <= MAX_YEAR:
        logger.debug(f"Date {original!r} outside {MIN_YEAR}-{MAX_YEAR}")
        return original

    return parsed.isoformat()


def as_date(value: str | None) -> date | None:
    """Return the date for an ISO date string, or None for anything else."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def split_date_range(text: str) -> tuple[str, str | None]:
    """
    Split "<start> - <end>" on the literal " - " separator.

    Returns:
        (start, end) with end None for single dates
    """
    if RANGE_SEPARATOR in text:
        start, end = text.split(RANGE_SEPARATOR, 1)
        return start.strip(), end.strip() or None
    return text.strip(), None


@dataclass
class DateRange:
    """Formatted start/end of an event date; each side is ISO, a sentinel or raw text."""

    start: str | None = None
    end: str | None = None

    @property
    def start_date(self) -> date | None:
        return as_date(self.start)

    @property
    def end_date(self) -> date | None:
        return as_date(self.end)


def parse_date_range(text: str | None, today: date | None = None) -> DateRange:
    """
    Parse an extracted date field into a ``DateRange``.

    A year-less start borrows the end's year, so "22 May - 15 Jun 2025"
    covers 2025-05-22 to 2025-06-15.
    """
    if not text or not text.strip():
        return DateRange()

    start_text, end_text = split_date_range(text)
    end_year = find_year(end_text) if end_text else None
    start_default = end_year if end_year and find_year(start_text) is None else None

    dates = DateRange(
        start=format_event_date(start_text, today, default_year=start_default),
        end=format_event_date(end_text, today) if end_text else None,
    )

    # "22 Nov - 15 Jan 2026" starts in the year before the end
    if start_default and dates.start_date and dates.end_date and dates.start_date > dates.end_date:
        dates.start = format_event_date(start_text, today, default_year=start_default - 1)

    return dates
