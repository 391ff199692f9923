"""
Notes feature: Service layer for note CRUD.
"""

import logging

from notes_app.features.notes.schemas import Note, NoteDraft
from notes_app.features.notes.store import NoteStore
from notes_app.features.notes.validation import NoteRules, ensure_valid

logger = logging.getLogger(__name__)


class NotesService:
    """CRUD operations for a user's notes.

    Writes are validated and trimmed before they reach the store.
    """

    def __init__(self, store: NoteStore, rules: NoteRules | None = None):
        self.store = store
        self.rules = rules or NoteRules.from_settings()

    async def create_note(self, user_id: str, title: str, content: str) -> Note:
        draft = ensure_valid(NoteDraft(title=title, content=content), self.rules)
        note = await self.store.insert(user_id, draft)
        logger.info(f"📝 Created note {note.id} for user {user_id}")
        return note

    async def get_note(self, user_id: str, note_id: str) -> Note:
        return await self.store.get(user_id, note_id)

    async def list_notes(self, user_id: str) -> list[Note]:
        """List notes for a user, ordered by newest first."""
        return await self.store.list(user_id)

    async def count_notes(self, user_id: str) -> int:
        return await self.store.count(user_id)

    async def update_note(self, user_id: str, note_id: str, title: str, content: str) -> Note:
        """Replace title and content together, never one without the other."""
        draft = ensure_valid(NoteDraft(title=title, content=content), self.rules)
        return await self.store.update(user_id, note_id, draft)

    async def delete_note(self, user_id: str, note_id: str) -> None:
        await self.store.delete(user_id, note_id)
        logger.info(f"🗑️ Deleted note {note_id} for user {user_id}")
