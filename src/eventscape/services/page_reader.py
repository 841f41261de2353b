"""Fetch listing pages as markdown through the Jina reader."""

import logging
from dataclasses import dataclass, field

import httpx

from eventscape.config import settings
from eventscape.exceptions import PageReadError
from eventscape.services.retry import RetryPolicy
from eventscape.utils.text import extract_markdown_images, extract_markdown_title, is_http_url

logger = logging.getLogger(__name__)


@dataclass
class ScrapedPage:
    """Markdown content of one page plus the title and images found in it."""

    url: str
    markdown: str
    title: str | None = None
    images: list[str] = field(default_factory=list)


class JinaReader:
    """Client for the Jina reader API, which renders a URL to markdown."""

    BASE_URL = "https://r.jina.ai/"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.client = client
        self.api_key = api_key if api_key is not None else settings.jina_api_key
        self.retry_policy = retry_policy or RetryPolicy.from_settings(
            retry_on=(httpx.HTTPError,)
        )
        if not self.api_key:
            logger.warning("Jina API key not configured; using anonymous rate limits")

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "text/plain",
            "X-Return-Format": "markdown",
            "X-With-Generated-Alt": "true",
            "X-With-Images-Summary": "true",
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def read(self, url: str) -> ScrapedPage:
        """
        Read ``url`` as markdown.

        Raises:
            PageReadError: for invalid URLs, request failures or empty content
        """
        if not is_http_url(url):
            raise PageReadError(f"Invalid URL: {url!r}")

        async def request() -> str:
            response = await self.client.get(f"{self.BASE_URL}{url}", headers=self._headers())
            response.raise_for_status()
            return response.text

        try:
            markdown = await self.retry_policy.run(request)
        except httpx.HTTPError as e:
            raise PageReadError(f"Failed to read {url}: {e}") from e

        if not markdown or not markdown.strip():
            raise PageReadError(f"No content returned for {url}")

        page = ScrapedPage(
            url=url,
            markdown=markdown,
            title=extract_markdown_title(markdown),
            images=extract_markdown_images(markdown),
        )
        logger.info(f"Read {len(markdown)} chars from {url} ({len(page.images)} images)")
        return page
