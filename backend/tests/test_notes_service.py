"""
Unit tests for the notes service, in-memory store and edit sessions.
"""

import asyncio

import pytest

from notes_app.core.exceptions import (
    EditSessionNotFoundError,
    NoteNotFoundError,
    NoteValidationError,
)
from notes_app.features.notes.schemas import NoteDraft
from notes_app.features.notes.service import NotesService
from notes_app.features.notes.sessions import EditSessionRegistry
from notes_app.features.notes.validation import NoteRules

RULES = NoteRules()


class TestNotesService:
    def test_create_trims_and_scopes_to_user(self, store):
        service = NotesService(store, RULES)
        note = asyncio.run(service.create_note("user-1", "  Meeting notes ", " Discuss roadmap for Q3 "))
        assert note.user_id == "user-1"
        assert note.title == "Meeting notes"
        assert note.content == "Discuss roadmap for Q3"

    def test_create_rejects_invalid_draft(self, store):
        service = NotesService(store, RULES)
        with pytest.raises(NoteValidationError) as exc_info:
            asyncio.run(service.create_note("user-1", "ab", "long enough content"))
        assert exc_info.value.reason == "title_too_short"
        assert asyncio.run(store.count("user-1")) == 0

    def test_list_is_newest_first_and_per_user(self, store):
        service = NotesService(store, RULES)

        async def scenario():
            await service.create_note("user-1", "First note", "first content here")
            await service.create_note("user-2", "Other user", "not visible to user-1")
            await service.create_note("user-1", "Second note", "second content here")
            return await service.list_notes("user-1"), await service.count_notes("user-1")

        notes, count = asyncio.run(scenario())
        assert [n.title for n in notes] == ["Second note", "First note"]
        assert count == 2

    def test_other_users_note_is_not_found(self, store):
        service = NotesService(store, RULES)

        async def scenario():
            note = await service.create_note("user-1", "Private", "only for user one")
            with pytest.raises(NoteNotFoundError):
                await service.get_note("user-2", note.id)
            with pytest.raises(NoteNotFoundError):
                await service.update_note("user-2", note.id, "Hijacked", "should never be written")
            with pytest.raises(NoteNotFoundError):
                await service.delete_note("user-2", note.id)
            return await service.get_note("user-1", note.id)

        note = asyncio.run(scenario())
        assert note.title == "Private"

    def test_update_replaces_title_and_content(self, store):
        service = NotesService(store, RULES)

        async def scenario():
            note = await service.create_note("user-1", "Draft title", "draft content here")
            await service.update_note("user-1", note.id, "Final title", "final content here")
            return await service.get_note("user-1", note.id)

        note = asyncio.run(scenario())
        assert (note.title, note.content) == ("Final title", "final content here")

    def test_invalid_update_leaves_note_untouched(self, store):
        service = NotesService(store, RULES)

        async def scenario():
            note = await service.create_note("user-1", "Draft title", "draft content here")
            with pytest.raises(NoteValidationError):
                await service.update_note("user-1", note.id, "Final title", "short")
            return await service.get_note("user-1", note.id)

        note = asyncio.run(scenario())
        assert (note.title, note.content) == ("Draft title", "draft content here")

    def test_delete(self, store):
        service = NotesService(store, RULES)

        async def scenario():
            note = await service.create_note("user-1", "Temporary", "delete me shortly")
            await service.delete_note("user-1", note.id)
            with pytest.raises(NoteNotFoundError):
                await service.get_note("user-1", note.id)

        asyncio.run(scenario())


class TestEditSessionRegistry:
    def test_auto_save_writes_through_to_store(self, store, settings):
        async def scenario():
            note = await store.insert("user-1", NoteDraft(title="Groceries", content="Milk, eggs, bread"))
            registry = EditSessionRegistry(store, settings)
            session = await registry.open("user-1", note.id)
            session.coordinator.on_draft_changed(NoteDraft(title="Groceries", content="Milk, eggs, bread, coffee"))
            await session.coordinator.wait_idle()
            return await store.get("user-1", note.id), session

        note, session = asyncio.run(scenario())
        assert note.content == "Milk, eggs, bread, coffee"
        assert session.coordinator.has_unsaved_changes is False

    def test_open_requires_ownership(self, store, settings):
        async def scenario():
            note = await store.insert("user-1", NoteDraft(title="Groceries", content="Milk, eggs, bread"))
            registry = EditSessionRegistry(store, settings)
            with pytest.raises(NoteNotFoundError):
                await registry.open("user-2", note.id)
            return registry

        assert len(asyncio.run(scenario())) == 0

    def test_sessions_are_private(self, store, settings):
        async def scenario():
            note = await store.insert("user-1", NoteDraft(title="Groceries", content="Milk, eggs, bread"))
            registry = EditSessionRegistry(store, settings)
            session = await registry.open("user-1", note.id)
            with pytest.raises(EditSessionNotFoundError):
                registry.get("user-2", session.id)

        asyncio.run(scenario())

    def test_close_disposes_coordinator(self, store, settings):
        async def scenario():
            note = await store.insert("user-1", NoteDraft(title="Groceries", content="Milk, eggs, bread"))
            registry = EditSessionRegistry(store, settings)
            session = await registry.open("user-1", note.id)
            session.coordinator.on_draft_changed(NoteDraft(title="Groceries", content="never saved content"))
            registry.close("user-1", session.id)
            await asyncio.sleep(settings.auto_save_delay * 3)
            with pytest.raises(EditSessionNotFoundError):
                registry.get("user-1", session.id)
            return await store.get("user-1", note.id), session

        note, session = asyncio.run(scenario())
        assert note.content == "Milk, eggs, bread"
        assert session.coordinator.disposed is True

    def test_close_all(self, store, settings):
        async def scenario():
            note = await store.insert("user-1", NoteDraft(title="Groceries", content="Milk, eggs, bread"))
            registry = EditSessionRegistry(store, settings)
            first = await registry.open("user-1", note.id)
            second = await registry.open("user-1", note.id)
            registry.close_all()
            return registry, first, second

        registry, first, second = asyncio.run(scenario())
        assert len(registry) == 0
        assert first.coordinator.disposed and second.coordinator.disposed


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestEditSessionEviction:
    def test_idle_session_is_disposed_and_removed(self, store, settings):
        clock = FakeClock()
        settings = settings.model_copy(update={"EDIT_SESSION_IDLE_TIMEOUT_S": 60})

        async def scenario():
            note = await store.insert("user-1", NoteDraft(title="Groceries", content="Milk, eggs, bread"))
            registry = EditSessionRegistry(store, settings, clock=clock)
            idle = await registry.open("user-1", note.id)
            clock.now += 30
            active = await registry.open("user-1", note.id)
            clock.now += 45
            evicted = registry.evict_idle()
            registry.get("user-1", active.id)
            with pytest.raises(EditSessionNotFoundError):
                registry.get("user-1", idle.id)
            return registry, idle, active, evicted

        registry, idle, active, evicted = asyncio.run(scenario())
        assert evicted == 1
        assert idle.coordinator.disposed is True
        assert active.coordinator.disposed is False
        assert len(registry) == 1

    def test_touching_a_session_keeps_it_alive(self, store, settings):
        clock = FakeClock()
        settings = settings.model_copy(update={"EDIT_SESSION_IDLE_TIMEOUT_S": 60})

        async def scenario():
            note = await store.insert("user-1", NoteDraft(title="Groceries", content="Milk, eggs, bread"))
            registry = EditSessionRegistry(store, settings, clock=clock)
            session = await registry.open("user-1", note.id)
            for _ in range(5):
                clock.now += 50
                registry.get("user-1", session.id)
            return registry, session

        registry, session = asyncio.run(scenario())
        assert len(registry) == 1
        assert session.coordinator.disposed is False

    def test_per_user_limit_closes_least_recently_used(self, store, settings):
        clock = FakeClock()
        settings = settings.model_copy(update={"MAX_EDIT_SESSIONS_PER_USER": 2})

        async def scenario():
            note = await store.insert("user-1", NoteDraft(title="Groceries", content="Milk, eggs, bread"))
            other = await store.insert("user-2", NoteDraft(title="Other list", content="Someone else's note"))
            registry = EditSessionRegistry(store, settings, clock=clock)
            first = await registry.open("user-1", note.id)
            clock.now += 1
            second = await registry.open("user-1", note.id)
            clock.now += 1
            registry.get("user-1", first.id)
            clock.now += 1
            theirs = await registry.open("user-2", other.id)
            third = await registry.open("user-1", note.id)
            return registry, first, second, third, theirs

        registry, first, second, third, theirs = asyncio.run(scenario())
        assert second.coordinator.disposed is True
        assert not first.coordinator.disposed and not third.coordinator.disposed
        assert theirs.coordinator.disposed is False
        assert len(registry) == 3
