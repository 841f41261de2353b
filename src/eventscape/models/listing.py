"""Scraped listing model and its moderation lifecycle."""

import enum

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eventscape.exceptions import InvalidTransitionError
from eventscape.models.base import Base, TimestampMixin


class ListingStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSED = "processed"
    ERROR = "error"


# Allowed lifecycle moves. REJECTED and PROCESSED are terminal.
LISTING_TRANSITIONS: dict[ListingStatus, frozenset[ListingStatus]] = {
    ListingStatus.PENDING: frozenset({ListingStatus.APPROVED, ListingStatus.REJECTED}),
    ListingStatus.APPROVED: frozenset({ListingStatus.PROCESSED, ListingStatus.ERROR}),
    ListingStatus.ERROR: frozenset({ListingStatus.APPROVED}),
    ListingStatus.REJECTED: frozenset(),
    ListingStatus.PROCESSED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    """Return True if a listing may move from ``current`` to ``target``."""
    try:
        current_status = ListingStatus(current)
        target_status = ListingStatus(target)
    except ValueError:
        return False
    return target_status in LISTING_TRANSITIONS[current_status]


class ScrapedListing(Base, TimestampMixin):
    """
    A raw title/URL/image triple scraped from an event listing page.

    Listings wait for an administrator to approve them before the
    ingestion pipeline turns them into events.
    """

    __tablename__ = "scraped_listings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False, unique=True, index=True)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ListingStatus.PENDING.value,
        index=True,
    )
    queued_for_processing: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    def transition_to(self, target: ListingStatus) -> None:
        """
        Move the listing to ``target``.

        Raises:
            InvalidTransitionError: if the move is not part of the lifecycle
        """
        if not can_transition(self.status, target.value):
            raise InvalidTransitionError(self.status, target.value)
        self.status = target.value

    def __repr__(self) -> str:
        return f"<ScrapedListing(id={self.id}, status={self.status!r}, url={self.url!r})>"
