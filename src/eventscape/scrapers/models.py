"""Data models for scrapers."""

from dataclasses import dataclass


@dataclass
class RawListing:
    """
    Raw listing scraped from an event listing page.

    This is the output format that all scrapers must return. Listings are
    stored as pending until an administrator approves them.
    """

    title: str  # Title as it appears on the listing page
    article_url: str  # Absolute URL of the article/event page
    image_url: str | None = None  # Absolute URL of the thumbnail

    def __post_init__(self) -> None:
        """Validate that title and article_url are present."""
        if not self.title or not self.title.strip():
            raise ValueError("title must not be empty")
        if not self.article_url:
            raise ValueError("article_url must not be empty")
