"""PostgreSQL storage backend for task records.

Beginner terms:
- Migration: creating the table before normal reads/writes.
- BIGSERIAL: auto-incrementing integer column; the database assigns task ids.
- RETURNING: makes INSERT/UPDATE hand back the written row in the same round trip.
- Row factory: returns query rows as dict-like objects instead of tuples.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, Protocol

from .errors import InternalStoreError, TaskNotFoundError, TaskValidationError
from .models import Task, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


class TaskStorage(Protocol):
    """Operations every storage backend provides."""

    def migrate(self) -> None: ...

    def list_tasks(self) -> list[Task]: ...

    def create_task(self, payload: TaskCreate) -> Task: ...

    def get_task(self, task_id: int) -> Task | None: ...

    def update_task(self, task_id: int, changes: TaskUpdate) -> Task: ...

    def delete_task(self, task_id: int) -> None: ...


def require_title(title: Any) -> str:
    """Reject missing or blank titles for callers that bypass the request models."""
    if not isinstance(title, str) or not title.strip():
        raise TaskValidationError("title is required and must not be blank")
    return title


class PostgresTaskStorage:
    """Thread-safe PostgreSQL-backed storage for Task records."""

    def __init__(self, database_url: str) -> None:
        if not database_url:
            raise ValueError("database_url is required")
        self.database_url = database_url
        # Lock guards DB operations done through this storage instance.
        self._lock = threading.Lock()
        # Lazy import helper keeps error message clear if psycopg is missing.
        self._psycopg, self._dict_row = self._load_psycopg()

    def migrate(self) -> None:
        """Create the tasks table if it does not already exist."""
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id BIGSERIAL PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT,
                    created_at TIMESTAMPTZ NOT NULL,
                    updated_at TIMESTAMPTZ NOT NULL
                )
                """)

    def list_tasks(self) -> list[Task]:
        """Return every task in insertion (id) order."""
        with self._transaction() as conn:
            rows = conn.execute("SELECT * FROM tasks ORDER BY id").fetchall()
        return [self._row_to_task(row) for row in rows]

    def create_task(self, payload: TaskCreate) -> Task:
        """Insert a new row; the database assigns the id."""
        title = require_title(payload.title)
        now = datetime.now(tz=UTC)
        with self._transaction() as conn:
            row = conn.execute(
                """
                INSERT INTO tasks (title, description, created_at, updated_at)
                VALUES (%s, %s, %s, %s)
                RETURNING *
                """,
                (title, payload.description, now, now),
            ).fetchone()
        return self._row_to_task(row)

    def get_task(self, task_id: int) -> Task | None:
        """Read one task by id and convert DB row to typed Task model."""
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = %s", (task_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    def update_task(self, task_id: int, changes: TaskUpdate) -> Task:
        """Apply the supplied fields while keeping unspecified fields unchanged."""
        current = self.get_task(task_id)
        if current is None:
            raise TaskNotFoundError(task_id)

        supplied = changes.changes()
        next_title = require_title(supplied["title"]) if "title" in supplied else current.title
        next_description = supplied.get("description", current.description)
        updated_at = datetime.now(tz=UTC)

        with self._transaction() as conn:
            row = conn.execute(
                """
                UPDATE tasks
                SET title = %s,
                    description = %s,
                    updated_at = %s
                WHERE id = %s
                RETURNING *
                """,
                (next_title, next_description, updated_at, task_id),
            ).fetchone()
        if row is None:
            # Deleted by a concurrent request between the lookup and the write.
            raise TaskNotFoundError(task_id)
        return self._row_to_task(row)

    def delete_task(self, task_id: int) -> None:
        """Remove the row permanently."""
        if self.get_task(task_id) is None:
            raise TaskNotFoundError(task_id)
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE id = %s", (task_id,))
            deleted = cursor.rowcount
        if deleted == 0:
            raise TaskNotFoundError(task_id)

    @contextmanager
    def _transaction(self) -> Iterator[Any]:
        """Yield a locked connection, commit on success, translate driver errors."""
        try:
            with self._lock, self._connect() as conn:
                yield conn
                conn.commit()
        except self._psycopg.Error as exc:
            logger.error("task_store event=db_error reason=%s", exc)
            raise InternalStoreError(str(exc)) from exc

    def _connect(self) -> Any:
        """Open a psycopg connection that yields dict-like rows."""
        return self._psycopg.connect(self.database_url, row_factory=self._dict_row)

    @staticmethod
    def _load_psycopg() -> tuple[Any, Any]:
        """Import psycopg and helpers with a friendly install hint on failure."""
        try:
            import psycopg
            from psycopg.rows import dict_row
        except ImportError as exc:  # pragma: no cover - exercised only without dependency
            raise RuntimeError(
                "PostgreSQL backend requires psycopg. Install with: "
                'python -m pip install "psycopg[binary]>=3.2,<4.0"'
            ) from exc
        return psycopg, dict_row

    @staticmethod
    def _parse_datetime(raw: Any) -> datetime:
        """Parse datetime value from database driver output."""
        if isinstance(raw, datetime):
            return raw
        if isinstance(raw, str):
            return datetime.fromisoformat(raw)
        raise TypeError(f"Unsupported datetime value: {type(raw)!r}")

    @classmethod
    def _row_to_task(cls, row: Any) -> Task:
        """Map one DB row to the canonical Task Pydantic model."""
        return Task(
            id=int(row["id"]),
            title=row["title"],
            description=row["description"],
            created_at=cls._parse_datetime(row["created_at"]),
            updated_at=cls._parse_datetime(row["updated_at"]),
        )
