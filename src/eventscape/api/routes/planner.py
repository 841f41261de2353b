"""Itinerary planner endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventscape.api.deps import get_itinerary_planner
from eventscape.database import get_db
from eventscape.models.event import Event, EventStatus
from eventscape.schemas.planner import PlannerRequest, PlannerResponse
from eventscape.services.planner import ItineraryPlanner, end_time_for, select_candidates

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/planner", response_model=PlannerResponse)
async def plan_day(
    request: PlannerRequest,
    db: AsyncSession = Depends(get_db),
    planner: ItineraryPlanner = Depends(get_itinerary_planner),
) -> PlannerResponse:
    """
    Plan a day out from approved events.

    Events are filtered by date, categories and opening hours at the start
    time before the LLM is asked for an itinerary.
    """
    result = await db.execute(select(Event).where(Event.status == EventStatus.APPROVED.value))
    events = result.scalars().all()

    candidates = select_candidates(events, request)
    logger.info(
        f"Planner: {len(candidates)} of {len(events)} events available on "
        f"{request.date} at {request.start_time}"
    )

    if not candidates:
        raise HTTPException(
            status_code=404,
            detail=(
                "No events are open at the chosen date and time. "
                "Try a different start time, date or categories."
            ),
        )

    plan = await planner.plan(request, candidates)
    return PlannerResponse(
        success=plan.success,
        candidates=len(candidates),
        end_time=end_time_for(request.start_time, request.duration_hours),
        plan=plan.plan,
        fallback_plan=plan.fallback_plan,
        error=plan.error,
    )
