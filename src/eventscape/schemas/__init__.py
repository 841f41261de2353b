"""Pydantic schemas for API requests and responses."""

from eventscape.schemas.event import (
    CategoriesResponse,
    CategoryResponse,
    EventResponse,
    EventsResponse,
)
from eventscape.schemas.extraction import (
    Coordinates,
    ExtractedEvent,
    OpeningHoursEntry,
    validate_category_ids,
    validate_store_type,
)
from eventscape.schemas.ingestion import (
    IngestionSummaryResponse,
    ListingErrorResponse,
    ProcessRequest,
)
from eventscape.schemas.listing import (
    ListingResponse,
    QueueRequest,
    QueueResponse,
    ScrapeRequest,
    ScrapeResponse,
)
from eventscape.schemas.planner import PlannerRequest, PlannerResponse

__all__ = [
    "CategoriesResponse",
    "CategoryResponse",
    "Coordinates",
    "EventResponse",
    "EventsResponse",
    "ExtractedEvent",
    "IngestionSummaryResponse",
    "ListingErrorResponse",
    "ListingResponse",
    "OpeningHoursEntry",
    "PlannerRequest",
    "PlannerResponse",
    "ProcessRequest",
    "QueueRequest",
    "QueueResponse",
    "ScrapeRequest",
    "ScrapeResponse",
    "validate_category_ids",
    "validate_store_type",
]
