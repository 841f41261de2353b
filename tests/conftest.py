"""Shared test fixtures."""

from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI

from eventscape.api.routes import admin, events, health, listings, planner
from eventscape.models.event import Event, EventStatus, StoreType
from eventscape.models.listing import ListingStatus, ScrapedListing


@pytest.fixture
def test_app() -> FastAPI:
    """Minimal FastAPI app without the APScheduler lifespan, for API tests."""
    app = FastAPI()
    app.include_router(health.router)
    app.include_router(listings.router, prefix="/api")
    app.include_router(events.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")
    app.include_router(planner.router, prefix="/api")
    return app


# ---------------------------------------------------------------------------
# Model factories
# ---------------------------------------------------------------------------


def make_listing(
    id: int = 1,
    status: ListingStatus = ListingStatus.APPROVED,
    url: str = "https://example.sg/events/night-festival",
    image_url: str | None = "https://example.sg/img/festival.jpg",
) -> ScrapedListing:
    return ScrapedListing(
        id=id,
        title="Singapore Night Festival",
        url=url,
        image_url=image_url,
        status=status.value,
        queued_for_processing=False,
        last_error=None,
    )


def make_event(
    id: int = 1,
    name: str = "Singapore Night Festival",
    status: EventStatus = EventStatus.APPROVED,
    category_ids: list[int] | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    opening_hours: str | None = None,
    opening_hours_structured: list | None = None,
    latitude: float | None = 1.2966,
    longitude: float | None = 103.8485,
    store_type: StoreType = StoreType.EVENT,
) -> Event:
    return Event(
        id=id,
        listing_id=None,
        source_url=f"https://example.sg/events/{id}",
        name=name,
        description="Light installations and performances around Bras Basah.",
        date_text="22 Aug - 30 Aug 2025",
        start_date=start_date,
        end_date=end_date,
        time_text=opening_hours or "Check website for opening hours",
        opening_hours=opening_hours,
        opening_hours_structured=opening_hours_structured,
        location="National Museum of Singapore, 93 Stamford Road, Singapore 178897",
        latitude=latitude,
        longitude=longitude,
        category_ids=category_ids or [1, 8],
        store_type=store_type.value,
        status=status.value,
        images=[],
    )


# ---------------------------------------------------------------------------
# Mock database sessions
# ---------------------------------------------------------------------------


def make_nested_ctx():
    @asynccontextmanager
    async def _ctx():
        yield

    return _ctx()


def make_mock_db(execute_results: list | None = None, get_result=None) -> AsyncMock:
    """AsyncSession stand-in: ``add``/``begin_nested`` are sync like the real session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.begin_nested = MagicMock(side_effect=lambda: make_nested_ctx())
    if execute_results is not None:
        db.execute = AsyncMock(side_effect=execute_results)
    if callable(get_result):
        db.get = AsyncMock(side_effect=get_result)
    else:
        db.get = AsyncMock(return_value=get_result)
    return db


def db_override(db: AsyncMock) -> Callable:
    """Return an async generator dependency that yields ``db``."""

    async def _override():
        yield db

    return _override


def scalars_result(items: list) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = items
    return result


def scalar_one_result(item) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = item
    return result
