"""Scheduled job that processes queued, approved listings."""

import logging

from sqlalchemy import select, update

from eventscape.clients import build_http_client, build_openai_client
from eventscape.config import settings
from eventscape.database import AsyncSessionLocal
from eventscape.models.listing import ListingStatus, ScrapedListing
from eventscape.services.ingestion import IngestionSummary, create_ingestion_service

logger = logging.getLogger(__name__)


async def run_process_queue(batch_size: int | None = None) -> IngestionSummary | None:
    """Process the oldest queued listings.

    Creates its own DB session so it can be called from the scheduler
    or a background task without depending on a request context.

    Returns:
        Batch summary, or None when there was nothing to do
    """
    if not settings.openai_api_key:
        logger.error("OpenAI API key not configured, skipping queue processing")
        return None

    batch_size = batch_size or settings.queue_batch_size

    async with AsyncSessionLocal() as db:
        result = await db.execute(
            select(ScrapedListing.id)
            .where(
                ScrapedListing.status == ListingStatus.APPROVED.value,
                ScrapedListing.queued_for_processing.is_(True),
            )
            .order_by(ScrapedListing.created_at)
            .limit(batch_size)
        )
        listing_ids = list(result.scalars().all())

        if not listing_ids:
            logger.info("Processing queue is empty")
            return None

        # Claim the batch so an overlapping run does not pick it up again
        await db.execute(
            update(ScrapedListing)
            .where(ScrapedListing.id.in_(listing_ids))
            .values(queued_for_processing=False)
        )
        await db.commit()

        logger.info(f"Processing {len(listing_ids)} queued listings")

        async with build_http_client() as http_client, build_openai_client() as openai_client:
            service = create_ingestion_service(db, http_client, openai_client)
            summary = await service.process_listings(listing_ids)

    logger.info(
        f"Queue run complete: {summary.processed} processed, {summary.failed} failed"
    )
    return summary
