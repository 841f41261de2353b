"""Event browsing endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventscape.database import get_db
from eventscape.models.category import MAX_CATEGORY_ID, MIN_CATEGORY_ID, Category
from eventscape.models.event import Event, EventStatus
from eventscape.schemas.event import (
    CategoriesResponse,
    CategoryResponse,
    EventResponse,
    EventsResponse,
)
from eventscape.utils.geo import calculate_haversine_distance

logger = logging.getLogger(__name__)
router = APIRouter()

DEFAULT_RADIUS_KM = 5.0


@router.get("/events", response_model=EventsResponse)
async def get_events(
    status: EventStatus | None = Query(
        default=EventStatus.APPROVED, description="Filter by event status"
    ),
    category: int | None = Query(
        default=None, ge=MIN_CATEGORY_ID, le=MAX_CATEGORY_ID, description="Category id"
    ),
    limit: int = Query(default=200, ge=1, le=1000),
    lat: float | None = Query(None, description="Reference latitude for distance filtering"),
    lng: float | None = Query(None, description="Reference longitude for distance filtering"),
    radius_km: float = Query(DEFAULT_RADIUS_KM, gt=0, description="Radius around lat/lng"),
    db: AsyncSession = Depends(get_db),
) -> EventsResponse:
    """
    Get events for the map, most recently updated first.

    With ``lat``/``lng`` only events within ``radius_km`` are returned, each
    with its distance; events without coordinates are left out. ``limit``
    applies after the radius filter.
    """
    if (lat is None) != (lng is None):
        raise HTTPException(status_code=400, detail="lat and lng must be given together")

    query = select(Event).order_by(Event.updated_at.desc())
    if status:
        query = query.where(Event.status == status.value)
    if category is not None:
        query = query.where(Event.category_ids.contains([category]))

    if lat is None or lng is None:
        result = await db.execute(query.limit(limit))
        items = [EventResponse.from_event(event) for event in result.scalars().all()]
        return EventsResponse(events=items, total=len(items))

    query = query.where(Event.latitude.is_not(None), Event.longitude.is_not(None))
    result = await db.execute(query)

    items = []
    for event in result.scalars().all():
        if not event.has_coordinates:
            continue
        distance_km = calculate_haversine_distance(lat, lng, event.latitude, event.longitude)
        if distance_km <= radius_km:
            items.append(EventResponse.from_event(event, distance_km=round(distance_km, 2)))
            if len(items) >= limit:
                break

    return EventsResponse(events=items, total=len(items))


@router.get("/events/categories", response_model=CategoriesResponse)
async def get_categories(db: AsyncSession = Depends(get_db)) -> CategoriesResponse:
    """Get the fixed category table ordered by name."""
    result = await db.execute(select(Category).order_by(Category.name))
    categories = [CategoryResponse.model_validate(c) for c in result.scalars().all()]
    return CategoriesResponse(categories=categories)


@router.get("/events/{event_id}", response_model=EventResponse)
async def get_event(event_id: int, db: AsyncSession = Depends(get_db)) -> EventResponse:
    """Get a single event."""
    event = await db.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
    return EventResponse.from_event(event)
