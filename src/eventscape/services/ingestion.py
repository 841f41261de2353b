"""Batch ingestion: read, extract, normalize and persist approved listings."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx
from openai import AsyncOpenAI
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventscape.config import settings
from eventscape.exceptions import InvalidTransitionError
from eventscape.models.event import Event, EventStatus
from eventscape.models.listing import ListingStatus, ScrapedListing, can_transition
from eventscape.services.geocoder import Geocoder
from eventscape.services.llm_extractor import EventExtractor
from eventscape.services.normalizer import EventNormalizer
from eventscape.services.page_reader import JinaReader
from eventscape.services.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class ListingFailure:
    listing_id: int
    title: str
    url: str
    error: str


@dataclass
class IngestionSummary:
    """Counts of processed vs. failed listings for one batch."""

    processed: int = 0
    failed: int = 0
    event_ids: list[int] = field(default_factory=list)
    errors: list[ListingFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.processed + self.failed

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "processed": self.processed,
            "failed": self.failed,
            "total": self.total,
            "event_ids": self.event_ids,
            "errors": [vars(error) for error in self.errors],
        }


class IngestionService:
    """
    Turns approved listings into events, one listing at a time.

    Each listing is committed on its own so a failure only affects the
    listing that caused it: the listing moves to ``error`` with the message
    in ``last_error`` and the batch carries on.
    """

    def __init__(
        self,
        db: AsyncSession,
        reader: JinaReader,
        extractor: EventExtractor,
        normalizer: EventNormalizer,
        delay: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize ingestion service.

        Args:
            db: Database session
            reader: Page reader for listing URLs
            extractor: LLM extractor
            normalizer: Normalizer for extracted fields
            delay: Seconds to wait between listings (uses settings if not provided)
            sleep: Awaitable sleep, replaceable in tests
        """
        self.db = db
        self.reader = reader
        self.extractor = extractor
        self.normalizer = normalizer
        self.delay = settings.processing_delay if delay is None else delay
        self.sleep = sleep

    async def process_listing(self, listing: ScrapedListing) -> Event:
        """
        Process one approved listing into an event.

        The listing is moved to ``processed`` on success. Nothing is committed.

        Raises:
            InvalidTransitionError: if the listing is not approved
            EventScapeError: if reading, extraction or validation fails
        """
        if not can_transition(listing.status, ListingStatus.PROCESSED.value):
            raise InvalidTransitionError(listing.status, ListingStatus.PROCESSED.value)

        logger.info(f"Processing listing {listing.id}: {listing.url}")

        page = await self.reader.read(listing.url)
        extracted = await self.extractor.extract(page.markdown, listing.url)
        normalized = await self.normalizer.normalize(extracted)
        normalized.images = [listing.image_url] if listing.image_url else page.images

        event = await self._upsert_event(listing, normalized)

        listing.transition_to(ListingStatus.PROCESSED)
        listing.last_error = None
        return event

    async def _upsert_event(self, listing: ScrapedListing, normalized) -> Event:
        result = await self.db.execute(select(Event).where(Event.source_url == listing.url))
        event = result.scalar_one_or_none()

        if event:
            logger.info(f"Updating existing event {event.id} for {listing.url}")
            normalized.apply_to(event)
        else:
            event = Event(
                source_url=listing.url,
                listing_id=listing.id,
                status=EventStatus.PENDING.value,
            )
            normalized.apply_to(event)
            self.db.add(event)

        await self.db.flush()
        return event

    async def process_listings(self, listing_ids: Sequence[int]) -> IngestionSummary:
        """
        Process listings by id, pausing ``delay`` seconds between them.

        Returns:
            Summary of processed and failed listings
        """
        summary = IngestionSummary()
        logger.info(f"Starting ingestion of {len(listing_ids)} listings")

        for index, listing_id in enumerate(listing_ids):
            if index > 0 and self.delay > 0:
                await self.sleep(self.delay)

            listing = await self.db.get(ScrapedListing, listing_id)
            if listing is None:
                summary.failed += 1
                summary.errors.append(
                    ListingFailure(listing_id, "", "", "Listing not found")
                )
                continue

            title, url = listing.title, listing.url

            try:
                event = await self.process_listing(listing)
                await self.db.commit()
            except InvalidTransitionError as e:
                logger.warning(f"Skipping listing {listing_id}: {e}")
                summary.failed += 1
                summary.errors.append(ListingFailure(listing_id, title, url, str(e)))
                continue
            except Exception as e:
                logger.error(f"Error processing listing {listing_id} ({url}): {e}", exc_info=True)
                await self._mark_error(listing_id, str(e))
                summary.failed += 1
                summary.errors.append(ListingFailure(listing_id, title, url, str(e)))
                continue

            summary.processed += 1
            summary.event_ids.append(event.id)

        logger.info(
            f"Ingestion complete: {summary.processed} processed, {summary.failed} failed, "
            f"{summary.total} total"
        )
        return summary

    async def _mark_error(self, listing_id: int, message: str) -> None:
        await self.db.rollback()
        listing = await self.db.get(ScrapedListing, listing_id)
        if listing is None:
            return
        listing.transition_to(ListingStatus.ERROR)
        listing.last_error = message
        await self.db.commit()


def create_ingestion_service(
    db: AsyncSession,
    http_client: httpx.AsyncClient,
    openai_client: AsyncOpenAI,
) -> IngestionService:
    """Wire an ``IngestionService`` from shared client handles."""
    retry_policy = RetryPolicy.from_settings()
    return IngestionService(
        db=db,
        reader=JinaReader(http_client),
        extractor=EventExtractor(openai_client, retry_policy=retry_policy),
        normalizer=EventNormalizer(Geocoder(http_client, retry_policy=retry_policy)),
    )
