"""SQLAlchemy ORM models."""

from eventscape.models.base import Base
from eventscape.models.category import CATEGORIES, Category
from eventscape.models.event import Event, EventStatus, StoreType
from eventscape.models.listing import ListingStatus, ScrapedListing

__all__ = [
    "Base",
    "CATEGORIES",
    "Category",
    "Event",
    "EventStatus",
    "ListingStatus",
    "ScrapedListing",
    "StoreType",
]
