"""
Session collaborator: supplies the current bearer token.

The history client reads the token on every request and never owns or
renews it.
"""

import base64
import binascii
import json
import time
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class SessionProvider(Protocol):
    """Anything exposing the current auth token (or None when signed out)."""

    @property
    def auth_token(self) -> str | None: ...


class TokenSession:
    """In-memory session holding a JWT issued by the backend."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token
        self.logger = logger.bind(component="session")

    @property
    def auth_token(self) -> str | None:
        return self._token

    @property
    def is_logged_in(self) -> bool:
        return self._token is not None

    def login(self, token: str) -> None:
        self._token = token
        self.logger.info("session_started")

    def logout(self) -> None:
        self._token = None
        self.logger.info("session_cleared")

    def is_token_valid(self, now: float | None = None) -> bool:
        """Check the JWT ``exp`` claim. Malformed tokens are treated as invalid."""
        if not self._token:
            return False

        parts = self._token.split(".")
        if len(parts) != 3:
            return False

        payload = parts[1] + "=" * (-len(parts[1]) % 4)
        try:
            claims = json.loads(base64.urlsafe_b64decode(payload))
        except (binascii.Error, ValueError):
            return False

        exp = claims.get("exp") if isinstance(claims, dict) else None
        if not isinstance(exp, int | float):
            return False

        current = time.time() if now is None else now
        if current >= exp:
            self.logger.warning("token_expired", expired_at=exp)
            return False
        return True
