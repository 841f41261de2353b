"""Validation schema for LLM-extracted event fields."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eventscape.exceptions import EventValidationError
from eventscape.models.category import MAX_CATEGORY_ID, MIN_CATEGORY_ID
from eventscape.models.event import StoreType

_NULL_STRINGS = {"", "null", "none", "n/a"}


def validate_category_ids(value: Any) -> list[int]:
    """
    Check that ``value`` is a non-empty list of known category ids.

    Raises:
        EventValidationError: for an empty or non-list value, or any id that is
            not an integer in [MIN_CATEGORY_ID, MAX_CATEGORY_ID]
    """
    if not isinstance(value, list) or not value:
        raise EventValidationError("category_ids must be a non-empty array")

    for category_id in value:
        # bool is an int subclass; True must not pass as category 1
        if isinstance(category_id, bool) or not isinstance(category_id, int):
            raise EventValidationError(f"Invalid category_id: {category_id!r}")
        if not MIN_CATEGORY_ID <= category_id <= MAX_CATEGORY_ID:
            raise EventValidationError(
                f"Invalid category_id: {category_id}. "
                f"Must be between {MIN_CATEGORY_ID} and {MAX_CATEGORY_ID}"
            )

    return list(value)


def validate_store_type(value: Any) -> str:
    """Return ``value`` if it is a known store type, else raise EventValidationError."""
    try:
        return StoreType(value).value
    except ValueError:
        raise EventValidationError(
            f"Invalid store_type: {value!r}. Must be 'event' or 'permanent_store'"
        ) from None


class Coordinates(BaseModel):
    """Latitude/longitude pair."""

    latitude: float
    longitude: float


class OpeningHoursEntry(BaseModel):
    """Opening hours for one weekday."""

    day: str
    open: str | None = None
    close: str | None = None
    closed: bool = False


class ExtractedEvent(BaseModel):
    """
    Event fields returned by the extraction LLM.

    Anything that fails validation here is fatal for the listing it came from.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = Field(min_length=1)
    date: str | None = None
    time: str | None = None
    location: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category_ids: list[int]
    store_type: Literal["event", "permanent_store"]
    store_type_reasoning: str | None = None
    opening_hours_structured: list[OpeningHoursEntry] | None = None
    coordinates: Coordinates | None = None

    @field_validator("date", "time", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str) and value.strip().lower() in _NULL_STRINGS:
            return None
        return str(value)

    @field_validator("category_ids", mode="before")
    @classmethod
    def _check_category_ids(cls, value: Any) -> list[int]:
        return validate_category_ids(value)
