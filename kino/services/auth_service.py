"""Admin session handling for operator-only endpoints."""

from __future__ import annotations

import secrets
from threading import RLock
from typing import Optional

from kino.utils.config import Settings, get_settings
from kino.utils.logger import get_logger


logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Base authentication failure."""


class AdminTokenNotConfiguredError(AuthenticationError):
    """Raised when ADMIN_TOKEN is missing."""


class InvalidAdminTokenError(AuthenticationError):
    """Raised when a provided admin or bearer token is rejected."""


class AdminAuthService:
    """Trades the configured admin token for a single revocable bearer session.

    With no ADMIN_TOKEN configured every admin check passes, which keeps
    local runs and the demo seed usable without setup.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._session_token: str | None = None
        self._lock = RLock()

    @property
    def auth_enabled(self) -> bool:
        return bool(self._settings.admin_token)

    def login(self, provided_admin_token: str) -> str:
        """Issue a bearer token; it replaces any previously issued one."""
        if not self.auth_enabled:
            raise AdminTokenNotConfiguredError(
                "ADMIN_TOKEN is not configured. Set ADMIN_TOKEN in environment variables."
            )
        if not secrets.compare_digest(provided_admin_token, self._settings.admin_token):
            logger.warning("Rejected admin login attempt")
            raise InvalidAdminTokenError("Invalid admin token")
        session_token = secrets.token_urlsafe(32)
        with self._lock:
            self._session_token = session_token
        return session_token

    def logout(self, bearer_token: str) -> None:
        with self._lock:
            if self._session_token is not None and secrets.compare_digest(
                bearer_token, self._session_token
            ):
                self._session_token = None

    def validate_bearer_token(self, bearer_token: str) -> None:
        if not self.auth_enabled:
            return
        with self._lock:
            current = self._session_token
        if current is None or not secrets.compare_digest(bearer_token, current):
            raise InvalidAdminTokenError("Invalid or expired bearer token. Login first.")
