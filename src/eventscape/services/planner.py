"""Day planner: candidate selection and LLM itinerary generation."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from eventscape.config import settings
from eventscape.exceptions import ExtractionError
from eventscape.models.category import CATEGORIES
from eventscape.models.event import Event
from eventscape.schemas.planner import PlannerRequest
from eventscape.services.llm_extractor import NON_RETRYABLE_ERRORS, load_json_object
from eventscape.services.retry import RetryPolicy
from eventscape.utils.opening_hours import is_open_at, parse_clock
from eventscape.utils.text import truncate

logger = logging.getLogger(__name__)

FALLBACK_EVENT_COUNT = 3
FALLBACK_SLOT_HOURS = 2

SYSTEM_MESSAGE = (
    "You are an expert Singapore event planner who creates detailed, practical "
    "itineraries. Always respond with valid JSON only."
)


def end_time_for(start_time: str, duration_hours: float) -> str:
    """
    "HH:MM" end of a plan, wrapping past midnight.

    Examples:
        >>> end_time_for("09:00", 4)
        '13:00'
        >>> end_time_for("22:30", 3)
        '01:30'
    """
    minutes = (parse_clock(start_time) + round(duration_hours * 60)) % (24 * 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def select_candidates(events: Sequence[Event], request: PlannerRequest) -> list[Event]:
    """
    Events that can be part of a plan for ``request``.

    An event qualifies when its date window covers the plan date, it shares
    a category with the request (no requested categories means any), and it
    is open at the start time. Excluded event ids are dropped unless that
    would leave fewer than ``FALLBACK_EVENT_COUNT`` candidates.
    """
    wanted = set(request.category_ids)
    candidates = [
        event
        for event in events
        if event.covers_date(request.date)
        and (not wanted or wanted.intersection(event.category_ids or []))
        and is_open_at(event, request.start_time, request.date)
    ]

    if request.exclude_event_ids:
        excluded = set(request.exclude_event_ids)
        fresh = [event for event in candidates if event.id not in excluded]
        if len(fresh) >= FALLBACK_EVENT_COUNT:
            return fresh
        logger.info("Too few unused events for variety; reusing earlier events")

    return candidates


def build_fallback_plan(request: PlannerRequest, events: Sequence[Event]) -> dict[str, Any]:
    """Plan of the first few candidates in consecutive two-hour slots."""
    start_hour = parse_clock(request.start_time) // 60
    chosen = list(events[:FALLBACK_EVENT_COUNT])

    itinerary = []
    for index, event in enumerate(chosen):
        slot_start = (start_hour + index * FALLBACK_SLOT_HOURS) % 24
        slot_end = (start_hour + (index + 1) * FALLBACK_SLOT_HOURS) % 24
        itinerary.append(
            {
                "type": "event",
                "time": f"{slot_start:02d}:00 - {slot_end:02d}:00",
                "event_id": event.id,
                "event_name": event.name,
                "location": event.location,
                "duration": f"{FALLBACK_SLOT_HOURS} hours",
                "description": event.description,
            }
        )

    return {
        "itinerary": itinerary,
        "itinerary_summary": (
            f"A {request.duration_hours:g}-hour Singapore experience for {request.pax} "
            f"people featuring {len(chosen)} activities."
        ),
    }


def _describe_event(event: Event) -> str:
    categories = ", ".join(CATEGORIES.get(cid, str(cid)) for cid in event.category_ids or [])
    return (
        f"- id {event.id}: {event.name} | {event.location} | categories: {categories} | "
        f"date: {event.date_text or 'n/a'} | hours: {event.time_text or 'n/a'} | "
        f"{truncate(event.description or '', 200)}"
    )


def build_planner_prompt(request: PlannerRequest, events: Sequence[Event]) -> str:
    end_time = end_time_for(request.start_time, request.duration_hours)

    variety = ""
    if request.exclude_event_ids:
        used = ", ".join(str(event_id) for event_id in request.exclude_event_ids)
        variety = (
            f"\nThis is plan #{request.generation} for this user. Previously used events: "
            f"{used}. Prefer different events and a different structure.\n"
        )

    event_lines = "\n".join(_describe_event(event) for event in events)
    return f"""Create a personalized Singapore itinerary from the available events.{variety}
Date: {request.date.isoformat()}
Time: {request.start_time} to {end_time} ({request.duration_hours:g} hours)
Group size: {request.pax}
Budget: S${request.budget_per_pax:g} per person (activities, transport and meals)
Transport: {request.transport}

Available events:
{event_lines}

Instructions:
- Use the whole timeframe with realistic Singapore travel times between venues
- Add meal breaks near the current or next venue
- Keep the total cost per person within budget
- Only use events from the list, referenced by id

Return a JSON object:
{{
  "itinerary": [
    {{"type": "event" | "travel" | "meal" | "bonus_activity", "time": "HH:MM - HH:MM",
      "event_id": <id for events>, "event_name": "...", "location": "...",
      "duration": "...", "cost_per_person": <number>, "description": "..."}}
  ],
  "itinerary_summary": "...",
  "budget_breakdown": {{"activities": 0, "transport": 0, "meals": 0, "subtotal": 0}}
}}"""


@dataclass
class PlanResult:
    success: bool
    plan: dict[str, Any] | None = None
    fallback_plan: dict[str, Any] | None = None
    error: str | None = None


class ItineraryPlanner:
    """Asks an OpenAI chat model for an itinerary over candidate events."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.client = client
        self.model = model or settings.planner_model
        self.retry_policy = (retry_policy or RetryPolicy.from_settings()).with_non_retryable(
            *NON_RETRYABLE_ERRORS
        )

    async def plan(self, request: PlannerRequest, events: Sequence[Event]) -> PlanResult:
        """
        Generate an itinerary for ``request`` over ``events``.

        Never raises for LLM problems; an unusable answer gives an
        unsuccessful result carrying a fallback plan.
        """
        temperature = 0.9 if request.exclude_event_ids else 0.8

        try:
            completion = await self.retry_policy.run(
                self.client.chat.completions.create,
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_MESSAGE},
                    {"role": "user", "content": build_planner_prompt(request, events)},
                ],
                temperature=temperature,
                max_tokens=3000,
                response_format={"type": "json_object"},
            )
            content = completion.choices[0].message.content if completion.choices else None
            if not content:
                raise ExtractionError("No response from LLM")
            plan = load_json_object(content)
        except (OpenAIError, ExtractionError) as e:
            logger.error(f"Itinerary planning failed: {e}", exc_info=True)
            return PlanResult(
                success=False,
                fallback_plan=build_fallback_plan(request, events),
                error=str(e),
            )

        if not plan.get("itinerary") or not plan.get("itinerary_summary"):
            logger.warning("Planner response missing itinerary structure, using fallback")
            return PlanResult(
                success=False,
                fallback_plan=build_fallback_plan(request, events),
                error="AI response missing required structure",
            )

        logger.info(f"Planned {len(plan['itinerary'])} itinerary items from {len(events)} events")
        return PlanResult(success=True, plan=plan)
