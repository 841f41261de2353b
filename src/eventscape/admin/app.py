"""Moderation UI, served as its own ASGI app (``eventscape.admin.app:admin_app``)."""

from fastapi import FastAPI
from sqladmin import Admin
from sqlalchemy.ext.asyncio import AsyncEngine

from eventscape.admin.auth import AdminAuth
from eventscape.admin.views import (
    CategoryAdmin,
    EventAdmin,
    IngestionToolsView,
    ListingAdmin,
)
from eventscape.config import settings
from eventscape.database import engine as default_engine

ADMIN_TITLE = "EventScape Moderation"

# Menu order
ADMIN_VIEWS = (ListingAdmin, EventAdmin, CategoryAdmin, IngestionToolsView)


def create_admin_app(engine: AsyncEngine | None = None) -> FastAPI:
    """Build the SQLAdmin app over ``engine`` (the application engine by default)."""
    app = FastAPI(title=ADMIN_TITLE)
    admin = Admin(
        app,
        engine or default_engine,
        authentication_backend=AdminAuth(secret_key=settings.admin_secret_key),
        title=ADMIN_TITLE,
    )
    for view in ADMIN_VIEWS:
        admin.add_view(view)
    return app


admin_app = create_admin_app()
