"""Base scraper interface for all listing scrapers."""

from abc import ABC, abstractmethod

import httpx

from eventscape.scrapers.models import RawListing


class BaseListingScraper(ABC):
    """
    Abstract base class for all listing scrapers.

    Scrapers receive the shared HTTP client rather than creating their own.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    @abstractmethod
    async def get_listings(self, url: str) -> list[RawListing]:
        """
        Fetch listings from a listing page.

        Args:
            url: Listing page URL

        Returns:
            List of raw listings

        Raises:
            Should NOT raise exceptions. Return empty list on errors and log warnings.
        """
        pass

    async def fetch_html(self, url: str) -> str:
        response = await self.client.get(url, follow_redirects=True)
        response.raise_for_status()
        return response.text
