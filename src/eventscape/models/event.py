"""Event model for normalized, persisted events."""

import enum
from datetime import date

from sqlalchemy import Date, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from eventscape.models.base import Base, TimestampMixin


class EventStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    EXPIRED = "expired"


class StoreType(str, enum.Enum):
    EVENT = "event"
    PERMANENT_STORE = "permanent_store"


class Event(Base, TimestampMixin):
    """
    Event or permanent venue shown on the map.

    ``date_text`` and ``time_text`` are the display strings; ``start_date`` and
    ``end_date`` are only set when the date text could be parsed.
    """

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    listing_id: Mapped[int | None] = mapped_column(
        ForeignKey("scraped_listings.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    source_url: Mapped[str] = mapped_column(String(1000), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Dates
    date_text: Mapped[str | None] = mapped_column(String(200), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)

    # Times / opening hours
    time_text: Mapped[str | None] = mapped_column(String(500), nullable=True)
    opening_hours: Mapped[str | None] = mapped_column(Text, nullable=True)
    opening_hours_structured: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    # Location
    location: Mapped[str] = mapped_column(Text, nullable=False)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Classification
    category_ids: Mapped[list[int]] = mapped_column(ARRAY(Integer), nullable=False)
    store_type: Mapped[str] = mapped_column(String(20), nullable=False)
    store_type_reasoning: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=EventStatus.PENDING.value,
        index=True,
    )
    images: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def covers_date(self, day: date) -> bool:
        """True if ``day`` is inside the event's date window; missing bounds are open-ended."""
        if self.start_date is not None and day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        return True

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name!r}, status={self.status!r})>"
