"""Pydantic schemas for the itinerary planner."""

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from eventscape.utils.opening_hours import parse_clock

MINUTES_PER_DAY = 24 * 60


class PlannerRequest(BaseModel):
    """User preferences for a day plan."""

    date: date
    start_time: str = Field(default="09:00", pattern=r"^\d{1,2}:\d{2}$")
    duration_hours: float = Field(default=4, gt=0, le=24)
    pax: int = Field(default=2, ge=1)
    category_ids: list[int] = []
    budget_per_pax: float = Field(default=100, ge=0)
    transport: Literal["public", "private"] = "public"

    # Variety mode: steer away from events used in earlier plans
    exclude_event_ids: list[int] = []
    generation: int = Field(default=1, ge=1)

    @field_validator("start_time")
    @classmethod
    def check_clock_time(cls, value: str) -> str:
        """Hours 0-23 and minutes 0-59."""
        if parse_clock(value) >= MINUTES_PER_DAY:
            raise ValueError(f"Time out of range: {value!r}")
        return value


class PlannerResponse(BaseModel):
    """Planner result; ``plan`` is the LLM itinerary or a fallback."""

    success: bool
    candidates: int
    end_time: str
    plan: dict[str, Any] | None = None
    fallback_plan: dict[str, Any] | None = None
    error: str | None = None
