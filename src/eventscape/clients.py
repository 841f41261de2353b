"""Construction of outbound client handles."""

import httpx
from openai import AsyncOpenAI

from eventscape.config import settings

USER_AGENT = "EventScapeSG/1.0 (+https://eventscape.sg)"


def build_http_client() -> httpx.AsyncClient:
    """HTTP client shared by the scrapers, page reader and geocoder of one unit of work."""
    return httpx.AsyncClient(
        timeout=settings.request_timeout,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


def build_openai_client() -> AsyncOpenAI:
    """OpenAI client with its built-in retries disabled in favour of ``RetryPolicy``."""
    return AsyncOpenAI(api_key=settings.openai_api_key, max_retries=0)
