"""
FastAPI dependency injection functions.
"""

from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from notes_app.config import get_settings
from notes_app.core.database import get_supabase_admin_client, get_supabase_client
from notes_app.core.exceptions import InvalidTokenError
from notes_app.core.security import JwtSessionProvider, SessionProvider
from notes_app.features.notes.service import NotesService
from notes_app.features.notes.sessions import EditSessionRegistry
from notes_app.features.notes.store import NoteStore, SupabaseNoteStore

# Bearer token scheme for Swagger UI
bearer_scheme = HTTPBearer()

_edit_sessions: EditSessionRegistry | None = None


def get_db() -> Client:
    """Dependency: get Supabase client."""
    return get_supabase_client()


@lru_cache
def get_note_store() -> NoteStore:
    """Dependency: the notes table behind the service and the edit sessions.

    Runs on the service_role client; ownership is enforced by the store's
    `user_id` filters, not by RLS.
    """
    return SupabaseNoteStore(get_supabase_admin_client(), get_settings().NOTES_TABLE)


@lru_cache
def get_session_provider() -> SessionProvider:
    """Dependency: verifies Supabase access tokens."""
    return JwtSessionProvider.from_settings()


def get_notes_service(store: NoteStore = Depends(get_note_store)) -> NotesService:
    return NotesService(store)


def get_edit_sessions() -> EditSessionRegistry:
    """Dependency: process-wide registry of open edit sessions."""
    global _edit_sessions
    if _edit_sessions is None:
        _edit_sessions = EditSessionRegistry(get_note_store())
    return _edit_sessions


def close_edit_sessions() -> None:
    """Dispose every open edit session (app shutdown)."""
    if _edit_sessions is not None:
        _edit_sessions.close_all()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    sessions: SessionProvider = Depends(get_session_provider),
) -> str:
    """Dependency: resolve the account behind the bearer token.

    Returns:
        str: The user's id.

    Raises:
        HTTPException 401: If the token is invalid, expired or has no subject.
    """
    user = sessions.current_user(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=InvalidTokenError().message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user.id
