"""Tests for Storage."""

import asyncio
from datetime import datetime, timezone

import pytest

from vc_assistant.errors import DataStoreError
from vc_assistant.models import (
    AddingPerson,
    AuthRecord,
    Idle,
    PendingUpdate,
    Searching,
    TraceEvent,
)
from vc_assistant.storage import Storage


class TestStorageInit:
    """Tests for Storage initialization."""

    @pytest.mark.asyncio
    async def test_init_creates_tables(self, storage):
        """Test that init creates all tables."""
        async with storage._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ) as cursor:
            tables = [row[0] for row in await cursor.fetchall()]
            assert "chat_users" in tables
            assert "people" in tables
            assert "tasks" in tables
            assert "trace_events" in tables

    @pytest.mark.asyncio
    async def test_query_before_init_raises(self):
        """Test that an uninitialized storage reports a data store error."""
        st = Storage(":memory:")
        with pytest.raises(DataStoreError, match="not initialized"):
            await st.get_person(1)


class TestStorageSessions:
    """Tests for session persistence."""

    @pytest.mark.asyncio
    async def test_unknown_user_gets_idle_session(self, storage):
        """Test first contact yields a default session."""
        session = await storage.get_session("nobody")
        assert session.user_id == "nobody"
        assert session.state == Idle()
        assert session.is_authenticated is False

    @pytest.mark.asyncio
    async def test_save_and_load_wizard_state(self, storage):
        """Test wizard state survives a round trip through the database."""
        state = AddingPerson(step="company", partial_record={"full_name": "Dana", "email": None})
        await storage.save_state("user1", state)

        session = await storage.get_session("user1")
        assert session.state == state

    @pytest.mark.asyncio
    async def test_save_state_preserves_authentication(self, storage):
        """Test an unrelated state write never clears is_authenticated."""
        ts = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
        await storage.save_auth(
            "user1",
            AuthRecord(is_authenticated=True, authenticated_at=ts, username="alice"),
        )

        await storage.save_state("user1", Searching())
        await storage.save_state("user1", PendingUpdate(target_id=3, proposed_fields={"status": "lead"}))
        await storage.save_state("user1", Idle())

        session = await storage.get_session("user1")
        assert session.is_authenticated is True
        assert session.auth.authenticated_at == ts
        assert session.auth.username == "alice"

    @pytest.mark.asyncio
    async def test_save_auth_preserves_state(self, storage):
        """Test an authentication write leaves the conversation state alone."""
        await storage.save_state("user1", Searching())
        await storage.save_auth("user1", AuthRecord(is_authenticated=True))

        session = await storage.get_session("user1")
        assert session.state == Searching()
        assert session.is_authenticated is True

    @pytest.mark.asyncio
    async def test_corrupt_state_data_resets_to_idle(self, storage):
        """Test unreadable JSON in state_data does not break loading."""
        await storage._conn.execute(
            "INSERT INTO chat_users (user_id, current_state, state_data) VALUES (?, ?, ?)",
            ("user1", "adding_person", "{not json"),
        )
        await storage._conn.commit()

        session = await storage.get_session("user1")
        assert session.state == Idle()


class TestStoragePeople:
    """Tests for people queries."""

    @pytest.mark.asyncio
    async def test_insert_person_assigns_id(self, storage):
        """Test inserting a person returns it with an id and author."""
        person = await storage.insert_person(
            {"full_name": "Dana Levi", "company": "Acme", "newsletter": True},
            added_by="user1",
        )
        assert person.id is not None
        assert person.full_name == "Dana Levi"
        assert person.newsletter is True
        assert person.added_by == "user1"
        assert person.created_at is not None

    @pytest.mark.asyncio
    async def test_insert_person_requires_name(self, storage):
        """Test a nameless person is rejected."""
        with pytest.raises(DataStoreError):
            await storage.insert_person({"company": "Acme"})

    @pytest.mark.asyncio
    async def test_insert_person_rejects_unknown_column(self, storage):
        """Test unknown columns are refused instead of interpolated."""
        with pytest.raises(DataStoreError, match="Unknown column"):
            await storage.insert_person({"full_name": "Dana", "salary": "1"})

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_substring(self, storage):
        """Test search matches any casing inside a value."""
        await storage.insert_person({"full_name": "Sarah Cohen", "company": "Sequoia"})

        results = await storage.search_people("SEQUO")
        assert [p.full_name for p in results] == ["Sarah Cohen"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term", ["Élodie", "élodie", "ÉLODIE", "ÜNICORN", "дмитрий"])
    async def test_search_folds_non_ascii_case(self, storage, term):
        """Test accented and Cyrillic capitals match in any casing."""
        await storage.insert_person({"full_name": "Élodie Durand", "company": "Ünicorn"})
        await storage.insert_person({"full_name": "Дмитрий Орлов"})

        results = await storage.search_people(term)
        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_search_ors_across_fields(self, storage):
        """Test each searchable field can produce a hit."""
        await storage.insert_person({"full_name": "A", "categories": "fintech"})
        await storage.insert_person({"full_name": "B", "more_info": "met at fintech week"})
        await storage.insert_person({"full_name": "C", "warm_intro": "via fintech fund"})
        await storage.insert_person({"full_name": "D", "company": "Biotech"})

        results = await storage.search_people("fintech")
        assert sorted(p.full_name for p in results) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_search_respects_limit(self, storage):
        """Test result count is capped."""
        for i in range(12):
            await storage.insert_person({"full_name": f"Investor {i}"})

        results = await storage.search_people("investor", limit=10)
        assert len(results) == 10

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, storage):
        """Test % and _ in the term do not act as LIKE wildcards."""
        await storage.insert_person({"full_name": "Plain Name"})

        assert await storage.search_people("%") == []
        assert await storage.search_people("_") == []

    @pytest.mark.asyncio
    async def test_latest_person_by_author(self, storage):
        """Test most recent person is resolved globally and per author."""
        first = await storage.insert_person({"full_name": "First"}, added_by="user1")
        await asyncio.sleep(0.001)
        second = await storage.insert_person({"full_name": "Second"}, added_by="user2")

        assert (await storage.latest_person()).id == second.id
        assert (await storage.latest_person(added_by="user1")).id == first.id
        assert await storage.latest_person(added_by="user3") is None

    @pytest.mark.asyncio
    async def test_latest_person_empty(self, storage):
        """Test no person yields None."""
        assert await storage.latest_person() is None

    @pytest.mark.asyncio
    async def test_update_person(self, storage):
        """Test updating fields of an existing person."""
        person = await storage.insert_person({"full_name": "Dana"})

        assert await storage.update_person(person.id, {"email": "dana@acme.io"}) is True
        updated = await storage.get_person(person.id)
        assert updated.email == "dana@acme.io"

    @pytest.mark.asyncio
    async def test_update_missing_person_returns_false(self, storage):
        """Test updating a nonexistent id reports no match."""
        assert await storage.update_person(999, {"email": "x@y.z"}) is False


class TestStorageTasks:
    """Tests for task queries."""

    @pytest.mark.asyncio
    async def test_insert_task_defaults(self, storage):
        """Test schema defaults fill status and priority."""
        task = await storage.insert_task({"text": "Call John", "created_by": "user1"})
        assert task.task_id is not None
        assert task.status == "pending"
        assert task.priority == "medium"
        assert task.created_by == "user1"

    @pytest.mark.asyncio
    async def test_list_tasks_with_filter(self, storage):
        """Test equality filter on task listing."""
        await storage.insert_task({"text": "A", "priority": "high"})
        await storage.insert_task({"text": "B", "priority": "low"})

        tasks = await storage.list_tasks({"priority": "high"})
        assert [t.text for t in tasks] == ["A"]

    @pytest.mark.asyncio
    async def test_list_tasks_limit(self, storage):
        """Test task listing is capped."""
        for i in range(15):
            await storage.insert_task({"text": f"Task {i}"})

        assert len(await storage.list_tasks(limit=10)) == 10

    @pytest.mark.asyncio
    async def test_list_tasks_rejects_unknown_filter(self, storage):
        """Test unknown filter columns are refused."""
        with pytest.raises(DataStoreError):
            await storage.list_tasks({"nonsense": "x"})

    @pytest.mark.asyncio
    async def test_update_and_delete_task(self, storage):
        """Test single-field update and delete by id."""
        task = await storage.insert_task({"text": "Call John"})

        assert await storage.update_task(task.task_id, "status", "done") is True
        assert (await storage.list_tasks({"task_id": task.task_id}))[0].status == "done"

        assert await storage.delete_task(task.task_id) is True
        assert await storage.delete_task(task.task_id) is False

    @pytest.mark.asyncio
    async def test_update_task_rejects_unknown_field(self, storage):
        """Test an unknown task field is refused."""
        task = await storage.insert_task({"text": "Call John"})
        with pytest.raises(DataStoreError):
            await storage.update_task(task.task_id, "task_id; DROP TABLE tasks", "1")


class TestStorageTraceEvents:
    """Tests for TraceEvent storage."""

    @pytest.mark.asyncio
    async def test_save_and_filter_trace_events(self, storage):
        """Test saving and filtering trace events."""
        ts1 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        ts2 = datetime(2024, 1, 1, 12, 1, 0, tzinfo=timezone.utc)
        await storage.save_trace_event(
            TraceEvent(id="e1", event_type="message_received", actor="orchestrator", data={}, timestamp=ts1)
        )
        await storage.save_trace_event(
            TraceEvent(id="e2", event_type="command_handled", actor="state_machine", data={"command": "/start"}, timestamp=ts2)
        )

        events = await storage.get_trace_events()
        assert [e.id for e in events] == ["e2", "e1"]

        events = await storage.get_trace_events(event_types=["command_handled"])
        assert len(events) == 1
        assert events[0].data == {"command": "/start"}

        events = await storage.get_trace_events(after=ts1)
        assert [e.id for e in events] == ["e2"]

        events = await storage.get_trace_events(actor="orchestrator")
        assert [e.id for e in events] == ["e1"]
