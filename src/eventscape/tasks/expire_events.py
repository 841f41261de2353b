"""Scheduled job that expires approved events whose end date has passed."""

import logging
from datetime import date

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from eventscape.database import AsyncSessionLocal
from eventscape.models.event import Event, EventStatus
from eventscape.utils.dates import singapore_today

logger = logging.getLogger(__name__)


async def expire_past_events(db: AsyncSession, today: date | None = None) -> int:
    """Mark approved events that ended before ``today`` as expired. Does not commit."""
    today = today or singapore_today()
    result = await db.execute(
        update(Event)
        .where(
            Event.status == EventStatus.APPROVED.value,
            Event.end_date.is_not(None),
            Event.end_date < today,
        )
        .values(status=EventStatus.EXPIRED.value)
    )
    return result.rowcount or 0


async def run_expire_events() -> int:
    """Expire past events in a session of its own."""
    async with AsyncSessionLocal() as db:
        count = await expire_past_events(db)
        await db.commit()

    logger.info(f"Expired {count} events")
    return count
