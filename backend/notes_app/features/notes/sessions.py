"""
Notes feature: Edit sessions.

Each open editor gets its own auto-save coordinator, keyed by a session id.
Closing the editor disposes the coordinator so no timer outlives it.
Editors that vanish without closing are evicted once idle for
EDIT_SESSION_IDLE_TIMEOUT_S, and each user holds at most
MAX_EDIT_SESSIONS_PER_USER sessions (the least recently used goes first).
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable

from notes_app.config import Settings, get_settings
from notes_app.core.exceptions import EditSessionNotFoundError
from notes_app.features.notes.autosave import AutoSaveCoordinator
from notes_app.features.notes.schemas import NoteDraft
from notes_app.features.notes.store import NoteStore

logger = logging.getLogger(__name__)


@dataclass
class EditSession:
    id: str
    user_id: str
    note_id: str
    coordinator: AutoSaveCoordinator
    last_touched: float = field(default=0.0)


class EditSessionRegistry:
    """Open edit sessions for all users of this process."""

    def __init__(
        self,
        store: NoteStore,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self._clock = clock
        self._sessions: dict[str, EditSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def open(self, user_id: str, note_id: str) -> EditSession:
        """Start editing a note the user owns.

        Raises:
            NoteNotFoundError: The note is missing or not owned by the user.
        """
        self.evict_idle()
        note = await self.store.get(user_id, note_id)

        async def persist(draft: NoteDraft):
            return await self.store.update(user_id, note_id, draft)

        self._enforce_user_limit(user_id)
        session = EditSession(
            id=str(uuid.uuid4()),
            user_id=user_id,
            note_id=note_id,
            coordinator=AutoSaveCoordinator.create(note.to_draft(), persist, self.settings),
            last_touched=self._clock(),
        )
        self._sessions[session.id] = session
        logger.info(f"✏️ Opened edit session {session.id} on note {note_id}")
        return session

    def get(self, user_id: str, session_id: str) -> EditSession:
        """Look up a session and mark it as used."""
        self.evict_idle()
        session = self._sessions.get(session_id)
        if session is None or session.user_id != user_id:
            raise EditSessionNotFoundError(session_id)
        session.last_touched = self._clock()
        return session

    def close(self, user_id: str, session_id: str) -> None:
        session = self.get(user_id, session_id)
        self._dispose(session)
        logger.info(f"Closed edit session {session_id}")

    def evict_idle(self) -> int:
        """Dispose sessions untouched for longer than the idle timeout."""
        cutoff = self._clock() - self.settings.EDIT_SESSION_IDLE_TIMEOUT_S
        idle = [s for s in self._sessions.values() if s.last_touched < cutoff]
        for session in idle:
            self._dispose(session)
        if idle:
            logger.info(f"🧹 Evicted {len(idle)} idle edit session(s)")
        return len(idle)

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.coordinator.dispose()
        if self._sessions:
            logger.info(f"Disposed {len(self._sessions)} open edit session(s)")
        self._sessions.clear()

    def _enforce_user_limit(self, user_id: str) -> None:
        owned = sorted(
            (s for s in self._sessions.values() if s.user_id == user_id),
            key=lambda s: s.last_touched,
        )
        excess = len(owned) - self.settings.MAX_EDIT_SESSIONS_PER_USER + 1
        for session in owned[:max(excess, 0)]:
            logger.warning(f"Edit session limit reached for user {user_id}, closing {session.id}")
            self._dispose(session)

    def _dispose(self, session: EditSession) -> None:
        session.coordinator.dispose()
        del self._sessions[session.id]
