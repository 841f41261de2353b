"""Unit tests for the geocoder."""

from unittest.mock import AsyncMock

import httpx

from eventscape.services.geocoder import Geocoder
from eventscape.services.retry import RetryPolicy

ONEMAP_HIT = {
    "found": 1,
    "results": [{"SEARCHVAL": "ESPLANADE", "LATITUDE": "1.28967", "LONGITUDE": "103.85607"}],
}
NOMINATIM_HIT = [{"lat": "1.2816", "lon": "103.8636", "display_name": "Gardens by the Bay"}]
LONDON = [{"lat": "51.5072", "lon": "-0.1276", "display_name": "London"}]


def make_geocoder(handler) -> tuple[Geocoder, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    policy = RetryPolicy(max_attempts=2, base_delay=0, sleep=AsyncMock())
    return Geocoder(client, user_agent="eventscape-tests", retry_policy=policy), requests


class TestGeocoder:
    async def test_postal_code_uses_onemap(self) -> None:
        geocoder, requests = make_geocoder(lambda request: httpx.Response(200, json=ONEMAP_HIT))

        coordinates = await geocoder.geocode("1 Esplanade Drive, Singapore 038981")

        assert (coordinates.latitude, coordinates.longitude) == (1.28967, 103.85607)
        assert len(requests) == 1
        assert requests[0].url.host == "www.onemap.gov.sg"
        assert requests[0].url.params["searchVal"] == "038981"
        assert requests[0].url.params["returnGeom"] == "Y"

    async def test_onemap_miss_falls_back_to_nominatim(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "www.onemap.gov.sg":
                return httpx.Response(200, json={"found": 0, "results": []})
            return httpx.Response(200, json=NOMINATIM_HIT)

        geocoder, requests = make_geocoder(handler)

        coordinates = await geocoder.geocode("18 Marina Gardens Drive, Singapore 018953")

        assert coordinates.latitude == 1.2816
        assert [r.url.host for r in requests] == [
            "www.onemap.gov.sg",
            "nominatim.openstreetmap.org",
        ]

    async def test_nominatim_query_is_cleaned(self) -> None:
        geocoder, requests = make_geocoder(lambda request: httpx.Response(200, json=NOMINATIM_HIT))

        await geocoder.geocode("Level 2, Gardens by the Bay")

        params = requests[0].url.params
        assert params["q"] == "Gardens by the Bay, Singapore"
        assert params["countrycodes"] == "sg"
        assert params["format"] == "json"
        assert requests[0].headers["User-Agent"] == "eventscape-tests"

    async def test_results_outside_singapore_are_discarded(self) -> None:
        geocoder, _ = make_geocoder(lambda request: httpx.Response(200, json=LONDON))

        assert await geocoder.geocode("Covent Garden") is None

    async def test_first_result_inside_singapore_wins(self) -> None:
        geocoder, _ = make_geocoder(
            lambda request: httpx.Response(200, json=LONDON + NOMINATIM_HIT)
        )

        coordinates = await geocoder.geocode("Gardens by the Bay")

        assert coordinates.longitude == 103.8636

    async def test_raw_location_tried_when_cleaned_misses(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "Level" in request.url.params["q"]:
                return httpx.Response(200, json=NOMINATIM_HIT)
            return httpx.Response(200, json=[])

        geocoder, requests = make_geocoder(handler)

        coordinates = await geocoder.geocode("Level 3, Funan, Singapore")

        assert coordinates is not None
        assert [r.url.params["q"] for r in requests] == [
            "Funan, Singapore",
            "Level 3, Funan, Singapore",
        ]

    async def test_http_errors_mean_no_coordinates(self) -> None:
        geocoder, requests = make_geocoder(lambda request: httpx.Response(503))

        assert await geocoder.geocode("Gardens by the Bay") is None
        # One lookup, retried once
        assert len(requests) == 2

    async def test_transport_errors_mean_no_coordinates(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        geocoder, _ = make_geocoder(handler)

        assert await geocoder.geocode("Gardens by the Bay") is None

    async def test_blank_location(self) -> None:
        geocoder, requests = make_geocoder(lambda request: httpx.Response(200, json=[]))

        assert await geocoder.geocode("  ") is None
        assert requests == []
