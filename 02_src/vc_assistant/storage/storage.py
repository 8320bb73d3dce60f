"""SQLite storage implementation."""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Protocol

import aiosqlite

from ..config import resolve_db_path
from ..errors import DataStoreError
from ..logging_config import get_logger
from ..models import (
    PERSON_FIELDS,
    SEARCHABLE_PERSON_FIELDS,
    TASK_FIELDS,
    TASK_FILTER_FIELDS,
    AuthRecord,
    ConversationState,
    Person,
    Task,
    TraceEvent,
    UserSession,
    state_from_record,
    state_to_record,
)

logger = get_logger(__name__)

# Seconds SQLite waits on a locked database before failing the query.
BUSY_TIMEOUT = 5.0


class ISessionStore(Protocol):
    """Durable per-user conversation state."""

    async def get_session(self, user_id: str) -> UserSession:
        """Load a session; unknown users get a fresh idle session."""
        ...

    async def save_state(self, user_id: str, state: ConversationState) -> None:
        """Persist the conversation state. Never touches authentication fields."""
        ...

    async def save_auth(self, user_id: str, auth: AuthRecord) -> None:
        """Persist authentication status and display metadata."""
        ...


class IDataStore(Protocol):
    """CRUD and search over people and tasks."""

    async def search_people(
        self,
        term: str,
        fields: Iterable[str] = SEARCHABLE_PERSON_FIELDS,
        limit: int = 10,
    ) -> list[Person]:
        """Case-insensitive substring match OR-ed across fields."""
        ...

    async def insert_person(self, fields: dict, added_by: str | None = None) -> Person:
        """Insert one person and return it with its assigned id."""
        ...

    async def get_person(self, person_id: int) -> Person | None:
        """Get a person by id."""
        ...

    async def latest_person(self, added_by: str | None = None) -> Person | None:
        """Most recently created person, optionally restricted to one author."""
        ...

    async def update_person(self, person_id: int, updates: dict) -> bool:
        """Update a person. Returns False when no row matched."""
        ...

    async def insert_task(self, fields: dict) -> Task:
        """Insert one task and return it with its assigned id."""
        ...

    async def list_tasks(
        self, filters: dict | None = None, limit: int = 10
    ) -> list[Task]:
        """List tasks matching all equality filters."""
        ...

    async def update_task(self, task_id: int, field: str, value: Any) -> bool:
        """Set one task field. Returns False when no row matched."""
        ...

    async def delete_task(self, task_id: int) -> bool:
        """Delete a task. Returns False when no row matched."""
        ...


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(value: str | None) -> datetime | None:
    if not value:
        return None
    ts = datetime.fromisoformat(value)
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def _check_columns(columns: Iterable[str], allowed: Iterable[str]) -> None:
    unknown = set(columns) - set(allowed)
    if unknown:
        raise DataStoreError(f"Unknown column(s): {', '.join(sorted(unknown))}")


def _casefold(value: str | None) -> str | None:
    return value.casefold() if isinstance(value, str) else value


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_person(row: aiosqlite.Row) -> Person:
    return Person(
        id=row["id"],
        full_name=row["full_name"],
        email=row["email"],
        company=row["company"],
        categories=row["categories"],
        status=row["status"],
        linkedin_profile=row["linkedin_profile"],
        internal_contact=row["internal_contact"],
        warm_intro=row["warm_intro"],
        agenda=row["agenda"],
        meeting_notes=row["meeting_notes"],
        more_info=row["more_info"],
        newsletter=bool(row["newsletter"]),
        should_meet=bool(row["should_meet"]),
        added_by=row["added_by"],
        created_at=_parse_ts(row["created_at"]),
    )


def _row_to_task(row: aiosqlite.Row) -> Task:
    return Task(
        task_id=row["task_id"],
        text=row["text"],
        assign_to=row["assign_to"],
        due_date=row["due_date"],
        status=row["status"],
        label=row["label"],
        priority=row["priority"],
        created_by=row["created_by"],
        created_at=_parse_ts(row["created_at"]),
    )


class Storage:
    """SQLite storage for sessions, people, tasks and trace events."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Initialize database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path, timeout=BUSY_TIMEOUT)
        self._conn.row_factory = aiosqlite.Row
        # SQLite LOWER() folds ASCII only; names are often accented or Cyrillic
        await self._conn.create_function("casefold", 1, _casefold, deterministic=True)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise DataStoreError("Storage not initialized")
        return self._conn

    async def _fetchall(self, sql: str, params: Iterable = ()) -> list[aiosqlite.Row]:
        conn = self._require_conn()
        try:
            cursor = await conn.execute(sql, tuple(params))
            return list(await cursor.fetchall())
        except aiosqlite.Error as e:
            raise DataStoreError(f"Query failed: {e}") from e

    async def _fetchone(self, sql: str, params: Iterable = ()) -> aiosqlite.Row | None:
        rows = await self._fetchall(sql, params)
        return rows[0] if rows else None

    async def _write(self, sql: str, params: Iterable = ()) -> aiosqlite.Cursor:
        conn = self._require_conn()
        try:
            cursor = await conn.execute(sql, tuple(params))
            await conn.commit()
            return cursor
        except aiosqlite.Error as e:
            await conn.rollback()
            raise DataStoreError(f"Write failed: {e}") from e

    # Sessions
    async def get_session(self, user_id: str) -> UserSession:
        """Load a session; unknown users get a fresh idle session."""
        row = await self._fetchone(
            """
            SELECT current_state, state_data, is_authenticated, authenticated_at,
                   username, first_name
            FROM chat_users
            WHERE user_id = ?
            """,
            (user_id,),
        )

        if not row:
            return UserSession(user_id=user_id)

        try:
            state_data = json.loads(row["state_data"] or "{}")
        except json.JSONDecodeError:
            logger.warning("Unreadable state_data for user %s, resetting", user_id)
            state_data = {}

        return UserSession(
            user_id=user_id,
            state=state_from_record(row["current_state"], state_data),
            auth=AuthRecord(
                is_authenticated=bool(row["is_authenticated"]),
                authenticated_at=_parse_ts(row["authenticated_at"]),
                username=row["username"],
                first_name=row["first_name"],
            ),
        )

    async def save_state(self, user_id: str, state: ConversationState) -> None:
        """Persist the conversation state. Never touches authentication fields."""
        name, data = state_to_record(state)
        await self._write(
            """
            INSERT INTO chat_users (user_id, current_state, state_data, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                current_state = excluded.current_state,
                state_data = excluded.state_data,
                updated_at = excluded.updated_at
            """,
            (user_id, name, json.dumps(data), _now()),
        )

    async def save_auth(self, user_id: str, auth: AuthRecord) -> None:
        """Persist authentication status and display metadata."""
        await self._write(
            """
            INSERT INTO chat_users
            (user_id, is_authenticated, authenticated_at, username, first_name, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                is_authenticated = excluded.is_authenticated,
                authenticated_at = excluded.authenticated_at,
                username = excluded.username,
                first_name = excluded.first_name,
                updated_at = excluded.updated_at
            """,
            (
                user_id,
                int(auth.is_authenticated),
                auth.authenticated_at.isoformat() if auth.authenticated_at else None,
                auth.username,
                auth.first_name,
                _now(),
            ),
        )

    # People
    async def search_people(
        self,
        term: str,
        fields: Iterable[str] = SEARCHABLE_PERSON_FIELDS,
        limit: int = 10,
    ) -> list[Person]:
        """Case-insensitive substring match OR-ed across fields."""
        fields = list(fields)
        _check_columns(fields, SEARCHABLE_PERSON_FIELDS)
        if not fields:
            return []

        pattern = f"%{_escape_like(term.casefold())}%"
        where_clause = " OR ".join(
            f"casefold(COALESCE({column}, '')) LIKE ? ESCAPE '\\'" for column in fields
        )
        rows = await self._fetchall(
            f"""
            SELECT * FROM people
            WHERE {where_clause}
            ORDER BY id ASC
            LIMIT ?
            """,
            [pattern] * len(fields) + [limit],
        )
        return [_row_to_person(row) for row in rows]

    async def insert_person(self, fields: dict, added_by: str | None = None) -> Person:
        """Insert one person and return it with its assigned id."""
        _check_columns(fields, PERSON_FIELDS)
        if not fields.get("full_name"):
            raise DataStoreError("full_name is required")

        values = dict(fields)
        for flag in ("newsletter", "should_meet"):
            if flag in values:
                values[flag] = int(bool(values[flag]))
        values["added_by"] = added_by
        values["created_at"] = _now()

        columns = ", ".join(values)
        placeholders = ", ".join("?" * len(values))
        cursor = await self._write(
            f"INSERT INTO people ({columns}) VALUES ({placeholders})",
            values.values(),
        )

        person = await self.get_person(cursor.lastrowid)
        if person is None:
            raise DataStoreError("Inserted person could not be read back")
        return person

    async def get_person(self, person_id: int) -> Person | None:
        """Get a person by id."""
        row = await self._fetchone("SELECT * FROM people WHERE id = ?", (person_id,))
        return _row_to_person(row) if row else None

    async def latest_person(self, added_by: str | None = None) -> Person | None:
        """Most recently created person, optionally restricted to one author."""
        if added_by is not None:
            row = await self._fetchone(
                """
                SELECT * FROM people
                WHERE added_by = ?
                ORDER BY created_at DESC, id DESC
                LIMIT 1
                """,
                (added_by,),
            )
        else:
            row = await self._fetchone(
                "SELECT * FROM people ORDER BY created_at DESC, id DESC LIMIT 1"
            )
        return _row_to_person(row) if row else None

    async def update_person(self, person_id: int, updates: dict) -> bool:
        """Update a person. Returns False when no row matched."""
        _check_columns(updates, PERSON_FIELDS)
        if not updates:
            raise DataStoreError("No fields to update")

        values = dict(updates)
        for flag in ("newsletter", "should_meet"):
            if flag in values:
                values[flag] = int(bool(values[flag]))

        assignments = ", ".join(f"{column} = ?" for column in values)
        cursor = await self._write(
            f"UPDATE people SET {assignments} WHERE id = ?",
            list(values.values()) + [person_id],
        )
        return cursor.rowcount > 0

    # Tasks
    async def insert_task(self, fields: dict) -> Task:
        """Insert one task and return it with its assigned id."""
        _check_columns(fields, TASK_FIELDS + ("created_by",))

        values = dict(fields)
        values["created_at"] = _now()
        columns = ", ".join(values)
        placeholders = ", ".join("?" * len(values))
        cursor = await self._write(
            f"INSERT INTO tasks ({columns}) VALUES ({placeholders})",
            values.values(),
        )

        row = await self._fetchone(
            "SELECT * FROM tasks WHERE task_id = ?", (cursor.lastrowid,)
        )
        if row is None:
            raise DataStoreError("Inserted task could not be read back")
        return _row_to_task(row)

    async def list_tasks(
        self, filters: dict | None = None, limit: int = 10
    ) -> list[Task]:
        """List tasks matching all equality filters."""
        filters = filters or {}
        _check_columns(filters, TASK_FILTER_FIELDS)

        conditions = [f"{column} = ?" for column in filters]
        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = await self._fetchall(
            f"""
            SELECT * FROM tasks
            {where_clause}
            ORDER BY task_id ASC
            LIMIT ?
            """,
            list(filters.values()) + [limit],
        )
        return [_row_to_task(row) for row in rows]

    async def update_task(self, task_id: int, field: str, value: Any) -> bool:
        """Set one task field. Returns False when no row matched."""
        _check_columns([field], TASK_FIELDS)
        cursor = await self._write(
            f"UPDATE tasks SET {field} = ? WHERE task_id = ?",
            (value, task_id),
        )
        return cursor.rowcount > 0

    async def delete_task(self, task_id: int) -> bool:
        """Delete a task. Returns False when no row matched."""
        cursor = await self._write("DELETE FROM tasks WHERE task_id = ?", (task_id,))
        return cursor.rowcount > 0

    # TraceEvents
    async def save_trace_event(self, event: TraceEvent) -> None:
        """Save a trace event."""
        await self._write(
            """
            INSERT INTO trace_events (id, event_type, actor, data, timestamp)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                event.id or str(uuid.uuid4()),
                event.event_type,
                event.actor,
                json.dumps(event.data, default=str),
                event.timestamp.isoformat(),
            ),
        )

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters (newest first)."""
        conditions = []
        params: list = []

        if after:
            if after.tzinfo is None:
                after = after.replace(tzinfo=timezone.utc)
            conditions.append("timestamp > ?")
            params.append(after.isoformat())
        if event_types:
            placeholders = ",".join("?" * len(event_types))
            conditions.append(f"event_type IN ({placeholders})")
            params.extend(event_types)
        if actor:
            conditions.append("actor = ?")
            params.append(actor)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        params.append(limit)

        rows = await self._fetchall(
            f"""
            SELECT id, event_type, actor, data, timestamp
            FROM trace_events
            {where_clause}
            ORDER BY timestamp DESC
            LIMIT ?
            """,
            params,
        )

        return [
            TraceEvent(
                id=row["id"],
                event_type=row["event_type"],
                actor=row["actor"],
                data=json.loads(row["data"]),
                timestamp=_parse_ts(row["timestamp"]),
            )
            for row in rows
        ]
