"""Pydantic schemas for scraped listings."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ListingResponse(BaseModel):
    """Scraped listing response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    image_url: str | None = None
    status: str
    queued_for_processing: bool
    last_error: str | None = None
    created_at: datetime | None = None


class ScrapeRequest(BaseModel):
    """Request to scrape listings from an event listing page."""

    url: str
    scraper_type: str = "generic"


class ScrapeResponse(BaseModel):
    """Listings found on a scraped page (new and previously known)."""

    items: list[ListingResponse]
    created: int


class QueueRequest(BaseModel):
    """Request to queue a single URL for processing."""

    url: str


class QueueResponse(BaseModel):
    """Result of queueing a URL."""

    message: str
    id: int
    action: str  # "created" or "updated"
