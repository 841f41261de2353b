"""Normalization of extracted event fields before persistence."""

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

from eventscape.models.event import Event, StoreType
from eventscape.schemas.extraction import (
    Coordinates,
    ExtractedEvent,
    validate_category_ids,
    validate_store_type,
)
from eventscape.services.geocoder import Geocoder
from eventscape.utils.dates import ONGOING, parse_date_range, singapore_today
from eventscape.utils.geo import is_within_singapore
from eventscape.utils.text import normalise_landmark

logger = logging.getLogger(__name__)

NO_TIME_TEXT = "Check website for opening hours"


@dataclass
class NormalizedEvent:
    """Event fields ready to be written to an ``Event`` row."""

    name: str
    description: str
    location: str
    category_ids: list[int]
    store_type: str
    store_type_reasoning: str | None = None
    date_text: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    time_text: str = NO_TIME_TEXT
    opening_hours: str | None = None
    opening_hours_structured: list[dict[str, Any]] | None = None
    latitude: float | None = None
    longitude: float | None = None
    images: list[str] = field(default_factory=list)

    def apply_to(self, event: Event) -> Event:
        """Copy every normalized field onto ``event``."""
        for key, value in asdict(self).items():
            setattr(event, key, value)
        return event


def normalise_date_text(raw_date: str | None, store_type: str) -> str | None:
    """
    Display text for the date field.

    Examples:
        >>> normalise_date_text(None, "permanent_store")
        'Ongoing'
        >>> normalise_date_text(None, "event") is None
        True
        >>> normalise_date_text("Every Friday", "event")
        'Every Friday'
    """
    if raw_date:
        return raw_date
    if store_type == StoreType.PERMANENT_STORE.value:
        return ONGOING
    return None


def normalise_time_text(raw_time: str | None) -> tuple[str, str | None]:
    """
    Split a raw time into (display text, opening-hours text).

    With no time the display falls back to ``NO_TIME_TEXT`` and the
    opening-hours text stays None, so the venue is treated as open.
    """
    if raw_time:
        return raw_time, raw_time
    return NO_TIME_TEXT, None


class EventNormalizer:
    """
    Deterministic post-processing of an ``ExtractedEvent``.

    Steps:
    1. Validate category ids and store type
    2. Parse the date text into start/end dates
    3. Apply the date and time display defaults
    4. Replace vague area names with a landmark
    5. Resolve coordinates via the geocoder
    """

    def __init__(
        self,
        geocoder: Geocoder | None = None,
        today: Callable[[], date] = singapore_today,
    ) -> None:
        """
        Initialize normalizer.

        Args:
            geocoder: Geocoder for coordinate lookup (no lookup if not provided)
            today: Returns the reference date for year inference
        """
        self.geocoder = geocoder
        self.today = today

    async def normalize(self, extracted: ExtractedEvent) -> NormalizedEvent:
        """
        Normalize one extraction.

        Raises:
            EventValidationError: for invalid category ids or store type
        """
        category_ids = validate_category_ids(extracted.category_ids)
        store_type = validate_store_type(extracted.store_type)

        dates = parse_date_range(extracted.date, self.today())
        start_date = dates.start_date
        end_date = dates.end_date
        if end_date is None and store_type == StoreType.EVENT.value and dates.end is None:
            # A single-date event lasts one day
            end_date = start_date

        time_text, opening_hours = normalise_time_text(extracted.time)

        location = normalise_landmark(extracted.location)
        if location != extracted.location:
            logger.info(f"Normalized location '{extracted.location}' -> '{location}'")

        coordinates = await self.resolve_coordinates(location, extracted.coordinates)

        structured = None
        if extracted.opening_hours_structured:
            structured = [entry.model_dump() for entry in extracted.opening_hours_structured]

        return NormalizedEvent(
            name=extracted.name,
            description=extracted.description,
            location=location,
            category_ids=category_ids,
            store_type=store_type,
            store_type_reasoning=extracted.store_type_reasoning,
            date_text=normalise_date_text(extracted.date, store_type),
            start_date=start_date,
            end_date=end_date,
            time_text=time_text,
            opening_hours=opening_hours,
            opening_hours_structured=structured,
            latitude=coordinates.latitude if coordinates else None,
            longitude=coordinates.longitude if coordinates else None,
        )

    async def resolve_coordinates(
        self,
        location: str,
        suggested: Coordinates | None = None,
    ) -> Coordinates | None:
        """
        Geocode ``location``, falling back to the extractor's suggestion.

        A suggestion is only used when it lies inside Singapore. Returns None
        when neither source gives usable coordinates.
        """
        if self.geocoder is not None:
            coordinates = await self.geocoder.geocode(location)
            if coordinates:
                return coordinates

        if suggested and is_within_singapore(suggested.latitude, suggested.longitude):
            logger.info(f"Using extracted coordinates for '{location}'")
            return suggested

        logger.warning(f"Leaving '{location}' without coordinates")
        return None
