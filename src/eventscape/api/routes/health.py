"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from eventscape.database import get_db

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Simple status message indicating the API is running
    """
    return {"status": "ok"}


@router.get("/health/db", tags=["health"])
async def database_health_check(db: AsyncSession = Depends(get_db)) -> dict[str, str]:
    """Check that the database answers a trivial query."""
    await db.execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok"}
