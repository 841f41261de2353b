"""Pydantic schemas for batch processing requests and summaries."""

from pydantic import BaseModel, Field


class ProcessRequest(BaseModel):
    """Request to process specific approved listings."""

    listing_ids: list[int] = Field(min_length=1)


class ListingErrorResponse(BaseModel):
    """A listing that failed to process."""

    listing_id: int
    title: str
    url: str
    error: str


class IngestionSummaryResponse(BaseModel):
    """Batch summary: counts of processed vs. failed listings."""

    success: bool = True
    processed: int
    failed: int
    total: int
    event_ids: list[int] = []
    errors: list[ListingErrorResponse] = []
