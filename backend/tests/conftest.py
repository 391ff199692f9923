from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from notes_app.config import Settings
from notes_app.core.security import JwtSessionProvider
from notes_app.features.notes.store import InMemoryNoteStore

JWT_SECRET = "test-jwt-secret"


def _encode_token(sub: str | None = "user-1", secret: str = JWT_SECRET, expires_in: int = 3600, **claims) -> str:
    payload = {
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        "iat": datetime.now(timezone.utc),
        **claims,
    }
    if sub is not None:
        payload["sub"] = sub
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        SUPABASE_JWT_SECRET=JWT_SECRET,
        AUTO_SAVE_DELAY_MS=50,
        MIN_TITLE_LENGTH=3,
        MAX_TITLE_LENGTH=200,
        MIN_CONTENT_LENGTH=10,
    )


@pytest.fixture
def store() -> InMemoryNoteStore:
    return InMemoryNoteStore()


@pytest.fixture
def session_provider(settings) -> JwtSessionProvider:
    return JwtSessionProvider.from_settings(settings)


@pytest.fixture
def make_token():
    """Factory for Supabase-style access tokens signed with the test secret."""
    return _encode_token
