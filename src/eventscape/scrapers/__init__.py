"""Scraper registry for mapping scraper types to scraper classes."""

from typing import Type

import httpx

from eventscape.scrapers.base import BaseListingScraper
from eventscape.scrapers.html_listing import ArticleLinkScraper, HtmlListingScraper
from eventscape.scrapers.models import RawListing

# Registry mapping scraper type names to scraper classes
SCRAPER_REGISTRY: dict[str, Type[BaseListingScraper]] = {
    "generic": HtmlListingScraper,
    "article-links": ArticleLinkScraper,
}


def get_scraper(scraper_type: str, client: httpx.AsyncClient) -> BaseListingScraper | None:
    """
    Get a scraper instance by type.

    Args:
        scraper_type: The scraper type (e.g., "generic", "article-links")
        client: Shared HTTP client

    Returns:
        Scraper instance or None if type not found
    """
    scraper_class = SCRAPER_REGISTRY.get(scraper_type)
    if scraper_class:
        return scraper_class(client)
    return None


__all__ = [
    "SCRAPER_REGISTRY",
    "get_scraper",
    "ArticleLinkScraper",
    "BaseListingScraper",
    "HtmlListingScraper",
    "RawListing",
]
