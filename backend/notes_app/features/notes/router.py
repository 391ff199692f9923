"""
Notes feature: API routes for notes and their auto-saving edit sessions.
"""

from fastapi import APIRouter, Depends

from notes_app.core.dependencies import (
    get_current_user_id,
    get_edit_sessions,
    get_notes_service,
)
from notes_app.core.exceptions import AppBaseError, app_error_to_http, http_status_for
from notes_app.features.notes.schemas import (
    DraftChange,
    EditSessionResponse,
    NoteCreate,
    NoteDraft,
    NoteUpdate,
)
from notes_app.features.notes.service import NotesService
from notes_app.features.notes.sessions import EditSession, EditSessionRegistry

router = APIRouter()


def _http_error(error: AppBaseError):
    return app_error_to_http(error, http_status_for(error))


def _session_response(session: EditSession) -> EditSessionResponse:
    return EditSessionResponse(
        session_id=session.id,
        note_id=session.note_id,
        status=session.coordinator.status,
    )


# ── Edit sessions ────────────────────────────────────────

@router.get("/sessions/{session_id}", response_model=EditSessionResponse)
async def get_edit_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    sessions: EditSessionRegistry = Depends(get_edit_sessions),
):
    """Current save status of an edit session."""
    try:
        return _session_response(sessions.get(user_id, session_id))
    except AppBaseError as e:
        raise _http_error(e)


@router.patch("/sessions/{session_id}", response_model=EditSessionResponse)
async def change_draft(
    session_id: str,
    data: DraftChange,
    user_id: str = Depends(get_current_user_id),
    sessions: EditSessionRegistry = Depends(get_edit_sessions),
):
    """Report the editor's current values; saving happens after a quiet period."""
    try:
        session = sessions.get(user_id, session_id)
    except AppBaseError as e:
        raise _http_error(e)

    session.coordinator.on_draft_changed(NoteDraft(title=data.title, content=data.content))
    return _session_response(session)


@router.post("/sessions/{session_id}/save", response_model=EditSessionResponse)
async def save_draft_now(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    sessions: EditSessionRegistry = Depends(get_edit_sessions),
):
    """Save the current draft immediately (form submit)."""
    try:
        session = sessions.get(user_id, session_id)
        await session.coordinator.save_now()
    except AppBaseError as e:
        raise _http_error(e)
    return _session_response(session)


@router.delete("/sessions/{session_id}")
async def close_edit_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    sessions: EditSessionRegistry = Depends(get_edit_sessions),
):
    """Leave the editor. A pending auto-save is dropped."""
    try:
        sessions.close(user_id, session_id)
    except AppBaseError as e:
        raise _http_error(e)
    return {"message": "Edit session closed"}


# ── Notes ────────────────────────────────────────────────

@router.get("/")
async def list_notes(
    user_id: str = Depends(get_current_user_id),
    service: NotesService = Depends(get_notes_service),
):
    """List all notes for the current user, newest first."""
    try:
        notes = await service.list_notes(user_id)
        count = await service.count_notes(user_id)
    except AppBaseError as e:
        raise _http_error(e)
    return {"data": notes, "count": count}


@router.post("/")
async def create_note(
    data: NoteCreate,
    user_id: str = Depends(get_current_user_id),
    service: NotesService = Depends(get_notes_service),
):
    """Create a new note."""
    try:
        note = await service.create_note(user_id, data.title, data.content)
    except AppBaseError as e:
        raise _http_error(e)
    return {"data": note}


@router.get("/{note_id}")
async def get_note(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    service: NotesService = Depends(get_notes_service),
):
    try:
        note = await service.get_note(user_id, note_id)
    except AppBaseError as e:
        raise _http_error(e)
    return {"data": note}


@router.put("/{note_id}")
async def update_note(
    note_id: str,
    data: NoteUpdate,
    user_id: str = Depends(get_current_user_id),
    service: NotesService = Depends(get_notes_service),
):
    """Replace a note's title and content."""
    try:
        note = await service.update_note(user_id, note_id, data.title, data.content)
    except AppBaseError as e:
        raise _http_error(e)
    return {"data": note}


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    service: NotesService = Depends(get_notes_service),
):
    """Delete a note permanently."""
    try:
        await service.delete_note(user_id, note_id)
    except AppBaseError as e:
        raise _http_error(e)
    return {"message": "Note deleted"}


@router.post("/{note_id}/sessions", response_model=EditSessionResponse)
async def open_edit_session(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    sessions: EditSessionRegistry = Depends(get_edit_sessions),
):
    """Start editing a note with auto-save."""
    try:
        session = await sessions.open(user_id, note_id)
    except AppBaseError as e:
        raise _http_error(e)
    return _session_response(session)
