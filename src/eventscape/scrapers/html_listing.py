"""Generic listing scrapers for event article index pages."""

import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from eventscape.scrapers.base import BaseListingScraper
from eventscape.scrapers.models import RawListing

logger = logging.getLogger(__name__)

# The first selector that matches anything defines the listing containers
CONTAINER_SELECTORS = (
    "article",
    ".event-card",
    ".card",
    ".event-item",
    ".event-listing",
    '[data-type="event"]',
    ".post",
    ".item",
)

TITLE_SELECTORS = (
    "h1",
    "h2",
    "h3",
    ".title",
    ".event-title",
    '[data-type="title"]',
    ".heading",
    ".card-title",
)

LINK_SELECTORS = (
    "a[href]",
    ".event-link[href]",
    ".card-link[href]",
    ".title a[href]",
    '[data-type="link"][href]',
    ".read-more[href]",
)

IMAGE_SELECTORS = (
    "img",
    ".event-image",
    ".card-image",
    '[data-type="image"]',
    ".thumbnail img",
    ".featured-image img",
)


def _image_source(element: Tag) -> str | None:
    # Lazy-loaded images keep the real URL in data-src
    for attribute in ("src", "data-src", "data-lazy-src"):
        value = element.get(attribute)
        if value and not str(value).startswith("data:"):
            return str(value)
    return None


class HtmlListingScraper(BaseListingScraper):
    """
    Scraper for listing pages made of repeating cards.

    Each card contributes its first non-empty heading, first link and
    first image. Cards without a title or link are skipped.
    """

    async def get_listings(self, url: str) -> list[RawListing]:
        """Fetch and parse listings from ``url``."""
        try:
            html = await self.fetch_html(url)
        except Exception as e:
            logger.error(f"Listing scraper error for {url}: {e}", exc_info=True)
            return []

        listings = self._parse_html(html, url)
        logger.info(f"Found {len(listings)} listings on {url}")
        return listings

    def _parse_html(self, html: str, base_url: str) -> list[RawListing]:
        soup = BeautifulSoup(html, "html.parser")

        containers: list[Tag] = []
        for selector in CONTAINER_SELECTORS:
            containers = soup.select(selector)
            if containers:
                logger.debug(f"Using container selector '{selector}' ({len(containers)} matches)")
                break

        listings: list[RawListing] = []
        seen: set[str] = set()
        for container in containers:
            try:
                listing = self._parse_container(container, base_url)
            except Exception as e:
                logger.warning(f"Failed to parse listing container: {e}")
                continue
            if listing and listing.article_url not in seen:
                seen.add(listing.article_url)
                listings.append(listing)

        return listings

    def _parse_container(self, container: Tag, base_url: str) -> RawListing | None:
        title = ""
        for selector in TITLE_SELECTORS:
            element = container.select_one(selector)
            if element and element.get_text(strip=True):
                title = element.get_text(" ", strip=True)
                break

        article_url = ""
        for selector in LINK_SELECTORS:
            element = container.select_one(selector)
            if element:
                article_url = urljoin(base_url, str(element["href"]))
                break

        if not title or not article_url:
            return None

        image_url = None
        for selector in IMAGE_SELECTORS:
            element = container.select_one(selector)
            source = _image_source(element) if element else None
            if source:
                image_url = urljoin(base_url, source)
                break

        return RawListing(title=title, article_url=article_url, image_url=image_url)


class ArticleLinkScraper(BaseListingScraper):
    """
    Scraper for magazine index pages that mark article links with a class.

    Only links that have both a title and a nearby image are kept.
    """

    LINK_SELECTOR = "a.link-secondary"

    async def get_listings(self, url: str) -> list[RawListing]:
        """Fetch and parse article links from ``url``."""
        try:
            html = await self.fetch_html(url)
        except Exception as e:
            logger.error(f"Article link scraper error for {url}: {e}", exc_info=True)
            return []

        listings = self._parse_html(html, url)
        logger.info(f"Found {len(listings)} article links on {url}")
        return listings

    def _parse_html(self, html: str, base_url: str) -> list[RawListing]:
        soup = BeautifulSoup(html, "html.parser")
        listings: list[RawListing] = []

        for link in soup.select(self.LINK_SELECTOR):
            title = link.get_text(" ", strip=True)
            href = link.get("href")
            parent = link.find_parent("article") or link.find_parent("div")
            image = parent.find("img") if parent else None
            source = _image_source(image) if image else None

            if title and href and source:
                listings.append(
                    RawListing(
                        title=title,
                        article_url=urljoin(base_url, str(href)),
                        image_url=urljoin(base_url, source),
                    )
                )

        return listings
