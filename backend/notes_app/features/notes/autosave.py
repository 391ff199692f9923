"""
Notes feature: Debounced auto-save for one editing session.

State machine per coordinator:
  Idle -> Dirty     first change that differs from the last saved draft
  Dirty -> Saving   timer fires and the draft passes validation, or save_now()
  Saving -> Idle    persist succeeded
  Saving -> Dirty   persist failed (no automatic retry)

Background failures are only logged; the dirty flag staying up is the signal.
save_now() failures are raised to the caller.
"""

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

from notes_app.config import Settings, get_settings
from notes_app.core.exceptions import AppBaseError, NotePersistenceError
from notes_app.features.notes.debounce import DebounceTimer
from notes_app.features.notes.schemas import NoteDraft, SaveStatus
from notes_app.features.notes.validation import NoteRules, ensure_valid, validate

logger = logging.getLogger(__name__)

PersistCallback = Callable[[NoteDraft], Awaitable[object]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AutoSaveCoordinator:
    """Tracks dirty state for a draft and persists it after a quiet period.

    Scheduled and manual saves are not mutually exclusive: a save_now() can
    overlap a background save that already started. The store resolves that
    race (last write wins).

    A save that completes after the editor moved on (including a revert to
    the previously saved value) re-arms the timer, so the newer draft is
    written even when no further edit arrives.
    """

    def __init__(
        self,
        initial: NoteDraft,
        persist: PersistCallback,
        delay: float = 2.0,
        rules: NoteRules | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._persist = persist
        self._rules = rules or NoteRules.from_settings()
        self._clock = clock
        self._timer = DebounceTimer(delay)

        self._draft = initial
        self._last_acknowledged = initial
        self._in_flight = 0
        self._last_saved_at: datetime | None = None
        self._has_unsaved_changes = False
        self._disposed = False

    @classmethod
    def create(
        cls,
        initial: NoteDraft,
        persist: PersistCallback,
        settings: Settings | None = None,
        **kwargs,
    ) -> "AutoSaveCoordinator":
        """Build a coordinator with delay and rules taken from settings."""
        settings = settings or get_settings()
        return cls(
            initial,
            persist,
            delay=settings.auto_save_delay,
            rules=NoteRules.from_settings(settings),
            **kwargs,
        )

    # ── State ────────────────────────────────────────────

    @property
    def draft(self) -> NoteDraft:
        return self._draft

    @property
    def last_acknowledged(self) -> NoteDraft:
        return self._last_acknowledged

    @property
    def is_saving(self) -> bool:
        return self._in_flight > 0

    @property
    def has_unsaved_changes(self) -> bool:
        return self._has_unsaved_changes

    @property
    def last_saved_at(self) -> datetime | None:
        return self._last_saved_at

    @property
    def save_pending(self) -> bool:
        return self._timer.pending

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def status(self) -> SaveStatus:
        return SaveStatus(
            is_saving=self.is_saving,
            last_saved_at=self._last_saved_at,
            has_unsaved_changes=self._has_unsaved_changes,
        )

    # ── Editing surface ──────────────────────────────────

    def on_draft_changed(self, draft: NoteDraft) -> None:
        """Record the editor's current values and (re)arm the save timer."""
        if self._disposed:
            logger.debug("Ignoring draft change on a disposed coordinator")
            return

        self._draft = draft
        if draft == self._last_acknowledged:
            return

        self._has_unsaved_changes = True
        self._timer.schedule(self._scheduled_save)

    async def save_now(self) -> None:
        """Cancel the pending timer and persist the current draft right away.

        Raises:
            NoteValidationError: The current draft breaks a note rule.
            NotePersistenceError: The store rejected the write.
        """
        self._timer.cancel()
        draft = self._draft
        ensure_valid(draft, self._rules)

        try:
            await self._save(draft)
        except AppBaseError as e:
            logger.error(f"❌ Manual save failed: {e.message}")
            raise
        except Exception as e:
            logger.error(f"❌ Manual save failed: {e}")
            raise NotePersistenceError(detail=str(e)) from e

    def dispose(self) -> None:
        """Drop the pending timer. An in-flight save is left to finish."""
        self._timer.cancel()
        self._disposed = True

    async def wait_idle(self) -> None:
        """Wait for the pending timer and any running background save."""
        await self._timer.join()

    # ── Internals ────────────────────────────────────────

    async def _scheduled_save(self) -> None:
        draft = self._draft
        if draft == self._last_acknowledged:
            self._has_unsaved_changes = False
            return

        result = validate(draft, self._rules)
        if not result.valid:
            logger.debug(f"Auto-save skipped: {result.reason.value}")
            return

        try:
            await self._save(draft)
        except Exception as e:
            logger.error(f"❌ Auto-save failed: {e}")

    async def _save(self, draft: NoteDraft) -> None:
        self._in_flight += 1
        try:
            await self._persist(draft.trimmed())
        finally:
            self._in_flight -= 1

        self._last_saved_at = self._clock()
        self._last_acknowledged = draft
        self._has_unsaved_changes = self._draft != draft
        logger.info(f"💾 Note saved at {self._last_saved_at.isoformat()}")

        if self._has_unsaved_changes and not self._disposed and not self._timer.pending:
            self._timer.schedule(self._scheduled_save)
