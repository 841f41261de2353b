"""Unit tests for the ingestion service."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import make_listing, make_mock_db, scalar_one_result
from eventscape.exceptions import ExtractionError, InvalidTransitionError, PageReadError
from eventscape.models.event import Event, EventStatus
from eventscape.models.listing import ListingStatus
from eventscape.services.ingestion import IngestionService, IngestionSummary, ListingFailure
from eventscape.services.normalizer import NormalizedEvent
from eventscape.services.page_reader import ScrapedPage


def make_normalized(**overrides) -> NormalizedEvent:
    values = {
        "name": "Singapore Night Festival",
        "description": "Light installations and performances.",
        "location": "National Museum of Singapore, Singapore 178897",
        "category_ids": [1, 8],
        "store_type": "event",
        "latitude": 1.2966,
        "longitude": 103.8485,
    }
    values.update(overrides)
    return NormalizedEvent(**values)


def make_service(db, reader_side_effect=None) -> tuple[IngestionService, AsyncMock]:
    reader = AsyncMock()
    reader.read = AsyncMock(
        side_effect=reader_side_effect
        or (
            lambda url: ScrapedPage(
                url=url,
                markdown="# Singapore Night Festival",
                images=["https://cdn.example.sg/page.jpg"],
            )
        )
    )
    extractor = AsyncMock()
    extractor.extract = AsyncMock(return_value=MagicMock(name="extracted"))
    normalizer = AsyncMock()
    normalizer.normalize = AsyncMock(side_effect=lambda extracted: make_normalized())
    sleep = AsyncMock()
    service = IngestionService(db, reader, extractor, normalizer, delay=3.0, sleep=sleep)
    return service, sleep


def assign_ids(db) -> None:
    """Give added events an id, as a flush would."""

    def add(obj) -> None:
        if isinstance(obj, Event) and obj.id is None:
            obj.id = 100 + db.add.call_count

    db.add.side_effect = add


# ---------------------------------------------------------------------------
# process_listing
# ---------------------------------------------------------------------------


class TestProcessListing:
    async def test_creates_pending_event(self) -> None:
        listing = make_listing(id=7)
        db = make_mock_db(execute_results=[scalar_one_result(None)])
        service, _ = make_service(db)

        event = await service.process_listing(listing)

        db.add.assert_called_once_with(event)
        db.flush.assert_awaited_once()
        assert event.status == EventStatus.PENDING.value
        assert event.source_url == listing.url
        assert event.listing_id == 7
        assert event.name == "Singapore Night Festival"
        assert listing.status == ListingStatus.PROCESSED.value
        db.commit.assert_not_awaited()

    async def test_listing_image_preferred(self) -> None:
        listing = make_listing(image_url="https://example.sg/img/listing.jpg")
        db = make_mock_db(execute_results=[scalar_one_result(None)])
        service, _ = make_service(db)

        event = await service.process_listing(listing)

        assert event.images == ["https://example.sg/img/listing.jpg"]

    async def test_page_images_used_without_listing_image(self) -> None:
        listing = make_listing(image_url=None)
        db = make_mock_db(execute_results=[scalar_one_result(None)])
        service, _ = make_service(db)

        event = await service.process_listing(listing)

        assert event.images == ["https://cdn.example.sg/page.jpg"]

    async def test_existing_event_is_updated(self) -> None:
        listing = make_listing()
        existing = Event(
            id=42,
            source_url=listing.url,
            name="Old name",
            status=EventStatus.APPROVED.value,
        )
        db = make_mock_db(execute_results=[scalar_one_result(existing)])
        service, _ = make_service(db)

        event = await service.process_listing(listing)

        assert event is existing
        assert event.name == "Singapore Night Festival"
        assert event.status == EventStatus.APPROVED.value
        db.add.assert_not_called()

    async def test_pending_listing_is_refused(self) -> None:
        listing = make_listing(status=ListingStatus.PENDING)
        db = make_mock_db()
        service, _ = make_service(db)

        with pytest.raises(InvalidTransitionError):
            await service.process_listing(listing)
        service.reader.read.assert_not_awaited()


# ---------------------------------------------------------------------------
# process_listings
# ---------------------------------------------------------------------------


class TestProcessListings:
    async def test_processes_batch(self) -> None:
        listings = {
            1: make_listing(id=1, url="https://example.sg/a"),
            2: make_listing(id=2, url="https://example.sg/b"),
        }
        db = make_mock_db(
            execute_results=[scalar_one_result(None), scalar_one_result(None)],
            get_result=lambda model, listing_id: listings.get(listing_id),
        )
        assign_ids(db)
        service, sleep = make_service(db)

        summary = await service.process_listings([1, 2])

        assert summary.processed == 2
        assert summary.failed == 0
        assert summary.total == 2
        assert summary.event_ids == [101, 102]
        assert db.commit.await_count == 2
        sleep.assert_awaited_once_with(3.0)
        assert all(
            listing.status == ListingStatus.PROCESSED.value for listing in listings.values()
        )

    async def test_failure_marks_error_and_continues(self) -> None:
        listings = {
            1: make_listing(id=1, url="https://example.sg/a"),
            2: make_listing(id=2, url="https://example.sg/b"),
        }
        db = make_mock_db(
            execute_results=[scalar_one_result(None)],
            get_result=lambda model, listing_id: listings.get(listing_id),
        )
        assign_ids(db)

        def read(url: str) -> ScrapedPage:
            if url.endswith("/a"):
                raise PageReadError("Failed to read https://example.sg/a: 502")
            return ScrapedPage(url=url, markdown="# B")

        service, _ = make_service(db, reader_side_effect=read)

        summary = await service.process_listings([1, 2])

        assert summary.processed == 1
        assert summary.failed == 1
        assert listings[1].status == ListingStatus.ERROR.value
        assert "502" in listings[1].last_error
        assert listings[2].status == ListingStatus.PROCESSED.value
        db.rollback.assert_awaited_once()
        assert summary.errors[0].listing_id == 1
        assert summary.errors[0].url == "https://example.sg/a"

    async def test_extraction_error_is_recorded(self) -> None:
        listing = make_listing(id=3)
        db = make_mock_db(get_result=listing)
        service, _ = make_service(db)
        service.extractor.extract.side_effect = ExtractionError("No event found")

        summary = await service.process_listings([3])

        assert summary.failed == 1
        assert listing.status == ListingStatus.ERROR.value
        assert listing.last_error == "No event found"

    async def test_missing_listing(self) -> None:
        db = make_mock_db(get_result=None)
        service, _ = make_service(db)

        summary = await service.process_listings([99])

        assert summary.failed == 1
        assert summary.errors[0].error == "Listing not found"
        db.commit.assert_not_awaited()

    async def test_unapproved_listing_keeps_status(self) -> None:
        listing = make_listing(id=4, status=ListingStatus.REJECTED)
        db = make_mock_db(get_result=listing)
        service, _ = make_service(db)

        summary = await service.process_listings([4])

        assert summary.failed == 1
        assert listing.status == ListingStatus.REJECTED.value
        db.rollback.assert_not_awaited()

    async def test_no_sleep_for_single_listing(self) -> None:
        db = make_mock_db(execute_results=[scalar_one_result(None)], get_result=make_listing())
        service, sleep = make_service(db)

        await service.process_listings([1])

        sleep.assert_not_awaited()


class TestIngestionSummary:
    def test_as_dict(self) -> None:
        summary = IngestionSummary(
            processed=1,
            failed=1,
            event_ids=[5],
            errors=[ListingFailure(2, "Broken", "https://example.sg/x", "boom")],
        )

        assert summary.as_dict() == {
            "success": True,
            "processed": 1,
            "failed": 1,
            "total": 2,
            "event_ids": [5],
            "errors": [
                {"listing_id": 2, "title": "Broken", "url": "https://example.sg/x", "error": "boom"}
            ],
        }
