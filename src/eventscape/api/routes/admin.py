"""Admin API endpoints for processing and moderation."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventscape.api.deps import get_ingestion_service
from eventscape.database import get_db
from eventscape.models.event import Event, EventStatus
from eventscape.models.listing import ListingStatus, ScrapedListing
from eventscape.schemas.event import EventResponse
from eventscape.schemas.ingestion import IngestionSummaryResponse, ProcessRequest
from eventscape.services.ingestion import IngestionService
from eventscape.tasks.expire_events import expire_past_events
from eventscape.tasks.process_queue import run_process_queue

logger = logging.getLogger(__name__)
router = APIRouter()


async def _get_event(db: AsyncSession, event_id: int) -> Event:
    event = await db.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
    return event


@router.post("/admin/process-approved", response_model=IngestionSummaryResponse)
async def process_approved(
    request: ProcessRequest,
    db: AsyncSession = Depends(get_db),
    service: IngestionService = Depends(get_ingestion_service),
) -> IngestionSummaryResponse:
    """
    Process the given approved listings into events.

    This is a synchronous operation that waits between listings to respect
    API rate limits; use process-queue for large batches.
    """
    result = await db.execute(
        select(ScrapedListing.id)
        .where(
            ScrapedListing.id.in_(request.listing_ids),
            ScrapedListing.status == ListingStatus.APPROVED.value,
        )
        .order_by(ScrapedListing.created_at)
    )
    listing_ids = list(result.scalars().all())

    if not listing_ids:
        raise HTTPException(status_code=404, detail="No approved listings found")

    summary = await service.process_listings(listing_ids)
    return IngestionSummaryResponse(**summary.as_dict())


@router.post("/admin/process-queue")
async def process_queue(background_tasks: BackgroundTasks) -> dict[str, str]:
    """Process queued listings as a background task.

    Returns immediately; processing runs asynchronously.
    """
    background_tasks.add_task(run_process_queue)
    return {"status": "started"}


@router.post("/admin/expire-events")
async def expire_events(db: AsyncSession = Depends(get_db)) -> dict[str, int]:
    """Expire approved events whose end date has passed."""
    count = await expire_past_events(db)
    await db.commit()
    return {"expired": count}


@router.post("/admin/events/{event_id}/approve", response_model=EventResponse)
async def approve_event(event_id: int, db: AsyncSession = Depends(get_db)) -> EventResponse:
    """Publish a pending event."""
    event = await _get_event(db, event_id)
    if event.status != EventStatus.PENDING.value:
        raise HTTPException(
            status_code=409, detail=f"Only pending events can be approved (status {event.status!r})"
        )
    event.status = EventStatus.APPROVED.value
    await db.commit()
    logger.info(f"Approved event {event_id}: {event.name}")
    return EventResponse.from_event(event)


@router.post("/admin/events/{event_id}/reject")
async def reject_event(event_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, int | str]:
    """Reject an event; rejected events are removed."""
    event = await _get_event(db, event_id)
    await db.delete(event)
    await db.commit()
    logger.info(f"Rejected and removed event {event_id}")
    return {"status": "rejected", "id": event_id}


@router.delete("/admin/events/{event_id}")
async def delete_event(event_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, int | str]:
    """Delete an event."""
    event = await _get_event(db, event_id)
    await db.delete(event)
    await db.commit()
    logger.info(f"Deleted event {event_id}")
    return {"status": "deleted", "id": event_id}
