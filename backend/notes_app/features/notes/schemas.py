"""
Notes feature: Schemas for drafts, stored notes and save status.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict


class NoteDraft(BaseModel):
    """In-memory title/content values, not yet confirmed as persisted."""
    model_config = ConfigDict(frozen=True)

    title: str = ""
    content: str = ""

    def trimmed(self) -> "NoteDraft":
        return NoteDraft(title=self.title.strip(), content=self.content.strip())


class Note(BaseModel):
    """A row of the `notes` table."""
    id: str
    user_id: str
    title: str
    content: str
    created_at: datetime

    def to_draft(self) -> NoteDraft:
        return NoteDraft(title=self.title, content=self.content)


class SaveStatus(BaseModel):
    """Auto-save state shown next to the editor."""
    is_saving: bool = False
    last_saved_at: datetime | None = None
    has_unsaved_changes: bool = False


# ── Requests ─────────────────────────────────────────────
class NoteCreate(BaseModel):
    """Request to create a new note."""
    title: str
    content: str


class NoteUpdate(BaseModel):
    """Request to replace the title and content of a note."""
    title: str
    content: str


class DraftChange(BaseModel):
    """Current field values sent by the editor on every change."""
    title: str
    content: str


# ── Responses ────────────────────────────────────────────
class EditSessionResponse(BaseModel):
    session_id: str
    note_id: str
    status: SaveStatus
