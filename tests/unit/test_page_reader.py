"""Unit tests for the Jina page reader."""

from unittest.mock import AsyncMock

import httpx
import pytest

from eventscape.exceptions import PageReadError
from eventscape.services.page_reader import JinaReader
from eventscape.services.retry import RetryPolicy

MARKDOWN = """# Singapore Night Festival 2025

![Festival lights](https://cdn.example.sg/night-fest.jpg)

Nine nights of light installations across the Bras Basah.Bugis precinct.

![Festival lights](https://cdn.example.sg/night-fest.jpg)
![Performers](https://cdn.example.sg/performers.png "Street performers")
"""


def make_reader(handler, api_key: str | None = "jina-key") -> tuple[JinaReader, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    policy = RetryPolicy(
        max_attempts=2, base_delay=0, retry_on=(httpx.HTTPError,), sleep=AsyncMock()
    )
    return JinaReader(client, api_key=api_key, retry_policy=policy), requests


class TestJinaReader:
    async def test_reads_markdown(self) -> None:
        reader, requests = make_reader(lambda request: httpx.Response(200, text=MARKDOWN))

        page = await reader.read("https://example.sg/night-festival")

        assert page.url == "https://example.sg/night-festival"
        assert page.title == "Singapore Night Festival 2025"
        assert page.images == [
            "https://cdn.example.sg/night-fest.jpg",
            "https://cdn.example.sg/performers.png",
        ]
        assert str(requests[0].url) == "https://r.jina.ai/https://example.sg/night-festival"

    async def test_sends_reader_headers(self) -> None:
        reader, requests = make_reader(lambda request: httpx.Response(200, text=MARKDOWN))

        await reader.read("https://example.sg/night-festival")

        headers = requests[0].headers
        assert headers["X-Return-Format"] == "markdown"
        assert headers["Accept"] == "text/plain"
        assert headers["Authorization"] == "Bearer jina-key"

    async def test_no_authorization_without_key(self) -> None:
        reader, requests = make_reader(
            lambda request: httpx.Response(200, text=MARKDOWN), api_key=""
        )

        await reader.read("https://example.sg/night-festival")

        assert "Authorization" not in requests[0].headers

    async def test_invalid_url(self) -> None:
        reader, requests = make_reader(lambda request: httpx.Response(200, text=MARKDOWN))

        with pytest.raises(PageReadError, match="Invalid URL"):
            await reader.read("not a url")
        assert requests == []

    async def test_http_error_after_retries(self) -> None:
        reader, requests = make_reader(lambda request: httpx.Response(502))

        with pytest.raises(PageReadError, match="Failed to read"):
            await reader.read("https://example.sg/night-festival")
        assert len(requests) == 2

    async def test_empty_content(self) -> None:
        reader, _ = make_reader(lambda request: httpx.Response(200, text="  \n"))

        with pytest.raises(PageReadError, match="No content"):
            await reader.read("https://example.sg/night-festival")
