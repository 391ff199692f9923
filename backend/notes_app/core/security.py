"""
Security utilities: session lookup from Supabase-issued JWT access tokens.

Sign-up, login and token issuance all happen in Supabase Auth. This module
only answers "which account does this token belong to?".
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from jose import jwt, JWTError

from notes_app.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated account a request acts for."""
    id: str
    email: str | None = None


class SessionProvider(Protocol):
    """Capability: verify a session token and return its account, or None."""

    def current_user(self, token: str) -> CurrentUser | None: ...


class JwtSessionProvider:
    """Verifies Supabase access tokens locally with the project's JWT secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", audience: str | None = "authenticated"):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "JwtSessionProvider":
        settings = settings or get_settings()
        if not settings.SUPABASE_JWT_SECRET:
            raise ValueError("SUPABASE_JWT_SECRET not configured")
        return cls(
            secret=settings.SUPABASE_JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            audience=settings.JWT_AUDIENCE or None,
        )

    def decode(self, token: str) -> dict | None:
        """Decode and validate a JWT token. Returns payload or None if invalid."""
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
            )
        except JWTError as e:
            logger.debug(f"Rejected session token: {e}")
            return None

    def current_user(self, token: str) -> CurrentUser | None:
        payload = self.decode(token)
        if payload is None:
            return None

        user_id = payload.get("sub")
        if not user_id:
            return None

        return CurrentUser(id=str(user_id), email=payload.get("email"))
