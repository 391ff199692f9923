"""
Notes feature: Persistence capability and its adapters.

`NoteStore` is all the rest of the feature knows about storage. Every call is
scoped to the owning user id; a row owned by someone else looks the same as a
missing one.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Protocol

from supabase import Client

from notes_app.core.exceptions import NoteNotFoundError, NotePersistenceError
from notes_app.features.notes.schemas import Note, NoteDraft

logger = logging.getLogger(__name__)


class NoteStore(Protocol):
    """Capability: owner-scoped note rows."""

    async def insert(self, user_id: str, draft: NoteDraft) -> Note: ...

    async def update(self, user_id: str, note_id: str, draft: NoteDraft) -> Note: ...

    async def delete(self, user_id: str, note_id: str) -> None: ...

    async def get(self, user_id: str, note_id: str) -> Note: ...

    async def list(self, user_id: str) -> list[Note]: ...

    async def count(self, user_id: str) -> int: ...


class SupabaseNoteStore:
    """Note rows in a Supabase (PostgREST) table.

    Expects a service_role client: every query carries `eq("user_id", ...)`,
    which is the only thing keeping accounts apart.

    The supabase client is blocking, so each request runs in a worker thread
    to keep the event loop (and pending auto-save timers) responsive.
    """

    def __init__(self, db: Client, table: str = "notes"):
        self.db = db
        self.table = table

    async def insert(self, user_id: str, draft: NoteDraft) -> Note:
        insert_data = {
            "user_id": user_id,
            "title": draft.title,
            "content": draft.content,
        }
        result = await self._run(
            "insert", lambda: self.db.table(self.table).insert(insert_data).execute()
        )
        if not result.data:
            raise NotePersistenceError(detail="Insert returned no row")
        return Note(**result.data[0])

    async def update(self, user_id: str, note_id: str, draft: NoteDraft) -> Note:
        result = await self._run(
            "update",
            lambda: (
                self.db.table(self.table)
                .update({"title": draft.title, "content": draft.content})
                .eq("id", note_id)
                .eq("user_id", user_id)
                .execute()
            ),
        )
        if not result.data:
            raise NoteNotFoundError(note_id)
        return Note(**result.data[0])

    async def delete(self, user_id: str, note_id: str) -> None:
        result = await self._run(
            "delete",
            lambda: (
                self.db.table(self.table)
                .delete()
                .eq("id", note_id)
                .eq("user_id", user_id)
                .execute()
            ),
        )
        if not result.data:
            raise NoteNotFoundError(note_id)

    async def get(self, user_id: str, note_id: str) -> Note:
        result = await self._run(
            "get",
            lambda: (
                self.db.table(self.table)
                .select("*")
                .eq("id", note_id)
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            ),
        )
        if not result.data:
            raise NoteNotFoundError(note_id)
        return Note(**result.data[0])

    async def list(self, user_id: str) -> list[Note]:
        """List notes for a user, ordered by newest first."""
        result = await self._run(
            "list",
            lambda: (
                self.db.table(self.table)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            ),
        )
        return [Note(**row) for row in result.data]

    async def count(self, user_id: str) -> int:
        result = await self._run(
            "count",
            lambda: (
                self.db.table(self.table)
                .select("id", count="exact")
                .eq("user_id", user_id)
                .execute()
            ),
        )
        return result.count or 0

    async def _run(self, operation: str, call):
        try:
            return await asyncio.to_thread(call)
        except Exception as e:
            logger.error(f"❌ Supabase {operation} on '{self.table}' failed: {e}")
            raise NotePersistenceError(detail=str(e)) from e


class InMemoryNoteStore:
    """Process-local store for development and tests."""

    def __init__(self):
        self._rows: dict[str, Note] = {}
        self._order: dict[str, int] = {}
        self._seq = 0

    async def insert(self, user_id: str, draft: NoteDraft) -> Note:
        note = Note(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=draft.title,
            content=draft.content,
            created_at=datetime.now(timezone.utc),
        )
        self._rows[note.id] = note
        self._seq += 1
        self._order[note.id] = self._seq
        return note

    async def update(self, user_id: str, note_id: str, draft: NoteDraft) -> Note:
        note = self._owned(user_id, note_id)
        updated = note.model_copy(update={"title": draft.title, "content": draft.content})
        self._rows[note_id] = updated
        return updated

    async def delete(self, user_id: str, note_id: str) -> None:
        self._owned(user_id, note_id)
        del self._rows[note_id]
        del self._order[note_id]

    async def get(self, user_id: str, note_id: str) -> Note:
        return self._owned(user_id, note_id)

    async def list(self, user_id: str) -> list[Note]:
        notes = [n for n in self._rows.values() if n.user_id == user_id]
        return sorted(notes, key=lambda n: (n.created_at, self._order[n.id]), reverse=True)

    async def count(self, user_id: str) -> int:
        return sum(1 for n in self._rows.values() if n.user_id == user_id)

    def _owned(self, user_id: str, note_id: str) -> Note:
        note = self._rows.get(note_id)
        if note is None or note.user_id != user_id:
            raise NoteNotFoundError(note_id)
        return note
