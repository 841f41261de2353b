"""FastAPI dependencies that build clients and services per request."""

from collections.abc import AsyncGenerator

import httpx
from fastapi import Depends, HTTPException
from openai import AsyncOpenAI
from sqlalchemy.ext.asyncio import AsyncSession

from eventscape.clients import build_http_client, build_openai_client
from eventscape.config import settings
from eventscape.database import get_db
from eventscape.services.ingestion import IngestionService, create_ingestion_service
from eventscape.services.planner import ItineraryPlanner


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Provide an HTTP client that is closed after the request."""
    async with build_http_client() as client:
        yield client


async def get_openai_client() -> AsyncGenerator[AsyncOpenAI, None]:
    """Provide an OpenAI client closed after the request, or fail with 500 when no key is configured."""
    if not settings.openai_api_key:
        raise HTTPException(status_code=500, detail="OpenAI API key not configured")
    async with build_openai_client() as client:
        yield client


def get_ingestion_service(
    db: AsyncSession = Depends(get_db),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    openai_client: AsyncOpenAI = Depends(get_openai_client),
) -> IngestionService:
    return create_ingestion_service(db, http_client, openai_client)


def get_itinerary_planner(
    openai_client: AsyncOpenAI = Depends(get_openai_client),
) -> ItineraryPlanner:
    return ItineraryPlanner(openai_client)
