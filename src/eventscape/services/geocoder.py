"""Geocoding of Singapore locations via OneMap and Nominatim."""

import logging
from typing import Any

import httpx

from eventscape.config import settings
from eventscape.schemas.extraction import Coordinates
from eventscape.services.retry import RetryPolicy
from eventscape.utils.geo import is_within_singapore
from eventscape.utils.text import clean_location_for_geocoding, extract_postal_code

logger = logging.getLogger(__name__)


class Geocoder:
    """
    Resolves a location string to coordinates inside Singapore.

    Lookup order:
    1. OneMap search by postal code, when the location contains one
    2. Nominatim search on the cleaned location
    3. Nominatim search on the location as given, when it names Singapore

    Results outside Singapore are discarded. Lookup failures are logged and
    reported as "no coordinates"; ``geocode`` never raises.
    """

    ONEMAP_URL = "https://www.onemap.gov.sg/api/common/elastic/search"
    NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"

    def __init__(
        self,
        client: httpx.AsyncClient,
        user_agent: str | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        """
        Initialize geocoder.

        Args:
            client: Shared HTTP client
            user_agent: User-Agent sent to Nominatim (uses settings if not provided)
            retry_policy: Retry policy for each HTTP request
        """
        self.client = client
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.retry_policy = retry_policy or RetryPolicy.from_settings()

    async def geocode(self, location: str) -> Coordinates | None:
        """
        Find coordinates for ``location``.

        Returns:
            Coordinates within Singapore, or None if nothing suitable was found
        """
        if not location or not location.strip():
            return None

        postal_code = extract_postal_code(location)
        if postal_code:
            coordinates = await self._safe_lookup(self._search_onemap, postal_code)
            if coordinates:
                return coordinates

        cleaned = clean_location_for_geocoding(location)
        coordinates = await self._safe_lookup(self._search_nominatim, cleaned)
        if coordinates:
            return coordinates

        if cleaned != location and "singapore" in location.lower():
            coordinates = await self._safe_lookup(self._search_nominatim, location)
            if coordinates:
                return coordinates

        logger.warning(f"No coordinates found for '{location}'")
        return None

    async def _safe_lookup(self, lookup, query: str) -> Coordinates | None:
        try:
            return await lookup(query)
        except Exception as e:
            logger.warning(f"Geocoding lookup failed for '{query}': {e}")
            return None

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Any:
        async def request() -> Any:
            response = await self.client.get(url, params=params, headers=headers)
            response.raise_for_status()
            return response.json()

        return await self.retry_policy.run(request)

    async def _search_onemap(self, postal_code: str) -> Coordinates | None:
        data = await self._get_json(
            self.ONEMAP_URL,
            params={"searchVal": postal_code, "returnGeom": "Y", "getAddrDetails": "Y"},
        )

        if not data or not data.get("found") or not data.get("results"):
            logger.info(f"OneMap found nothing for postal code {postal_code}")
            return None

        result = data["results"][0]
        coordinates = self._in_bounds(result.get("LATITUDE"), result.get("LONGITUDE"))
        if coordinates:
            logger.info(
                f"OneMap: {postal_code} -> {coordinates.latitude}, {coordinates.longitude}"
            )
        return coordinates

    async def _search_nominatim(self, query: str) -> Coordinates | None:
        results = await self._get_json(
            self.NOMINATIM_URL,
            params={
                "format": "json",
                "q": query,
                "countrycodes": "sg",
                "limit": 3,
                "addressdetails": 1,
            },
            headers={"User-Agent": self.user_agent},
        )

        for result in results or []:
            coordinates = self._in_bounds(result.get("lat"), result.get("lon"))
            if coordinates:
                logger.info(
                    f"Nominatim: '{query}' -> {coordinates.latitude}, {coordinates.longitude}"
                )
                return coordinates
            logger.debug(f"Discarding result outside Singapore for '{query}': {result}")

        return None

    @staticmethod
    def _in_bounds(latitude: Any, longitude: Any) -> Coordinates | None:
        try:
            lat = float(latitude)
            lng = float(longitude)
        except (TypeError, ValueError):
            return None
        if not is_within_singapore(lat, lng):
            return None
        return Coordinates(latitude=lat, longitude=lng)
