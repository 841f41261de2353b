"""Session-based login for the moderation UI."""

import logging
import secrets

from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request

from eventscape.config import settings

logger = logging.getLogger(__name__)

SESSION_KEY = "admin_user"


def credentials_match(username: str, password: str) -> bool:
    """Compare against the configured admin account in constant time."""
    username_ok = secrets.compare_digest(username.encode(), settings.admin_username.encode())
    password_ok = secrets.compare_digest(password.encode(), settings.admin_password.encode())
    return username_ok and password_ok


class AdminAuth(AuthenticationBackend):
    """Single configured moderator account; the session stores who logged in."""

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = str(form.get("username") or "")
        password = str(form.get("password") or "")

        if not credentials_match(username, password):
            logger.warning(f"Failed admin login for '{username}'")
            return False

        request.session.update({SESSION_KEY: username})
        logger.info(f"Admin '{username}' logged in")
        return True

    async def logout(self, request: Request) -> bool:
        request.session.pop(SESSION_KEY, None)
        return True

    async def authenticate(self, request: Request) -> bool:
        return request.session.get(SESSION_KEY) == settings.admin_username
