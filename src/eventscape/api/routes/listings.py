"""Listing scraping, moderation and queue endpoints."""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventscape.api.deps import get_http_client
from eventscape.database import get_db
from eventscape.exceptions import InvalidTransitionError
from eventscape.models.listing import ListingStatus, ScrapedListing
from eventscape.schemas.listing import (
    ListingResponse,
    QueueRequest,
    QueueResponse,
    ScrapeRequest,
    ScrapeResponse,
)
from eventscape.scrapers import get_scraper
from eventscape.utils.text import is_http_url

logger = logging.getLogger(__name__)
router = APIRouter()


async def _get_listing(db: AsyncSession, listing_id: int) -> ScrapedListing:
    listing = await db.get(ScrapedListing, listing_id)
    if not listing:
        raise HTTPException(status_code=404, detail=f"Listing {listing_id} not found")
    return listing


def _transition(listing: ScrapedListing, target: ListingStatus) -> None:
    try:
        listing.transition_to(target)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/scrape", response_model=ScrapeResponse)
async def scrape_listings(
    request: ScrapeRequest,
    db: AsyncSession = Depends(get_db),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> ScrapeResponse:
    """
    Scrape an event listing page and store new listings as pending.

    Listings already known by URL are left untouched but included in the
    response.
    """
    if not is_http_url(request.url):
        raise HTTPException(status_code=400, detail="A valid http(s) URL is required")

    scraper = get_scraper(request.scraper_type, http_client)
    if not scraper:
        raise HTTPException(
            status_code=400, detail=f"Unknown scraper type: {request.scraper_type}"
        )

    raw_listings = await scraper.get_listings(request.url)
    if not raw_listings:
        raise HTTPException(status_code=404, detail="No items found on the page")

    urls = [raw.article_url for raw in raw_listings]
    result = await db.execute(select(ScrapedListing.url).where(ScrapedListing.url.in_(urls)))
    known = set(result.scalars().all())

    created = 0
    for raw in raw_listings:
        if raw.article_url in known:
            continue
        db.add(
            ScrapedListing(
                title=raw.title,
                url=raw.article_url,
                image_url=raw.image_url,
                status=ListingStatus.PENDING.value,
            )
        )
        known.add(raw.article_url)
        created += 1

    await db.commit()
    logger.info(f"Scraped {request.url}: {len(raw_listings)} listings, {created} new")

    result = await db.execute(
        select(ScrapedListing)
        .where(ScrapedListing.url.in_(urls))
        .order_by(ScrapedListing.created_at.desc())
    )
    items = [ListingResponse.model_validate(row) for row in result.scalars().all()]
    return ScrapeResponse(items=items, created=created)


@router.get("/listings", response_model=list[ListingResponse])
async def get_listings(
    status: ListingStatus | None = Query(default=None, description="Filter by status"),
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
) -> list[ScrapedListing]:
    """Get scraped listings, newest first."""
    query = select(ScrapedListing).order_by(ScrapedListing.created_at.desc()).limit(limit)
    if status:
        query = query.where(ScrapedListing.status == status.value)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("/listings/queue", response_model=QueueResponse)
async def add_to_queue(
    request: QueueRequest,
    db: AsyncSession = Depends(get_db),
) -> QueueResponse:
    """
    Queue a URL for processing.

    Unknown URLs are stored as approved listings straight away; known
    listings are approved (where their status allows it) and flagged.
    """
    if not is_http_url(request.url):
        raise HTTPException(status_code=400, detail="A valid http(s) URL is required")

    result = await db.execute(select(ScrapedListing).where(ScrapedListing.url == request.url))
    listing = result.scalar_one_or_none()

    if listing:
        if listing.status != ListingStatus.APPROVED.value:
            _transition(listing, ListingStatus.APPROVED)
        listing.queued_for_processing = True
        action = "updated"
    else:
        listing = ScrapedListing(
            title=f"Direct URL: {request.url}",
            url=request.url,
            status=ListingStatus.APPROVED.value,
            queued_for_processing=True,
        )
        db.add(listing)
        action = "created"

    await db.commit()
    logger.info(f"Queued {request.url} for processing ({action})")
    return QueueResponse(message="URL queued for processing", id=listing.id, action=action)


@router.post("/listings/{listing_id}/approve", response_model=ListingResponse)
async def approve_listing(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
) -> ScrapedListing:
    """Approve a pending listing and queue it for processing."""
    listing = await _get_listing(db, listing_id)
    _transition(listing, ListingStatus.APPROVED)
    listing.queued_for_processing = True
    await db.commit()
    return listing


@router.post("/listings/{listing_id}/reject", response_model=ListingResponse)
async def reject_listing(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
) -> ScrapedListing:
    """Reject a pending listing."""
    listing = await _get_listing(db, listing_id)
    _transition(listing, ListingStatus.REJECTED)
    listing.queued_for_processing = False
    await db.commit()
    return listing


@router.post("/listings/{listing_id}/retry", response_model=ListingResponse)
async def retry_listing(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
) -> ScrapedListing:
    """Move a failed listing back to approved and queue it again."""
    listing = await _get_listing(db, listing_id)
    if listing.status != ListingStatus.ERROR.value:
        raise HTTPException(
            status_code=409, detail=f"Only failed listings can be retried (status {listing.status!r})"
        )
    _transition(listing, ListingStatus.APPROVED)
    listing.queued_for_processing = True
    listing.last_error = None
    await db.commit()
    return listing
