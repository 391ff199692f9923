"""
Custom exception classes for unified error handling.
"""

from fastapi import HTTPException, status


class AppBaseError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class NoteValidationError(AppBaseError):
    """Raised when a note draft breaks a title/content rule.

    Never reaches the persistence layer. Only the first failing rule is carried.
    """
    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(message=message, detail=reason)


class NotePersistenceError(AppBaseError):
    """Raised when the backing store rejects a write or cannot be reached."""
    def __init__(self, message: str = "Failed to save note", detail: str | None = None):
        super().__init__(message=message, detail=detail)


class NoteNotFoundError(AppBaseError):
    """Raised when a note does not exist or is not owned by the caller."""
    def __init__(self, note_id: str):
        self.note_id = note_id
        super().__init__(
            message="Note not found",
            detail=f"No note with id '{note_id}' for this account.",
        )


class EditSessionNotFoundError(AppBaseError):
    """Raised when an edit session id is unknown, closed, or belongs to someone else."""
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            message="Edit session not found",
            detail="Reopen the note to start a new edit session.",
        )


class InvalidTokenError(AppBaseError):
    """Raised when a session token is invalid or expired."""
    def __init__(self):
        super().__init__(
            message="Invalid or expired session token",
            detail="Please sign in again.",
        )


# ── Utility: convert to HTTPException ────────────────────

def app_error_to_http(error: AppBaseError, status_code: int = 400) -> HTTPException:
    """Convert an AppBaseError to an HTTPException with consistent JSON body."""
    return HTTPException(
        status_code=status_code,
        detail={
            "error": error.message,
            "detail": error.detail,
            "type": type(error).__name__,
        },
    )


def http_status_for(error: AppBaseError) -> int:
    """Pick the HTTP status a router should answer with for an application error."""
    if isinstance(error, NoteValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, (NoteNotFoundError, EditSessionNotFoundError)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, InvalidTokenError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(error, NotePersistenceError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_400_BAD_REQUEST
