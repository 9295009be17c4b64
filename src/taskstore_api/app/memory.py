"""In-memory storage backend for tests and local runs without a database."""

from __future__ import annotations

import itertools
import threading
from datetime import UTC, datetime

from .errors import TaskNotFoundError
from .models import Task, TaskCreate, TaskUpdate
from .storage import require_title


class InMemoryTaskStorage:
    """Dict-backed implementation of the TaskStorage protocol."""

    def __init__(self) -> None:
        self._tasks: dict[int, Task] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def migrate(self) -> None:
        return None

    def list_tasks(self) -> list[Task]:
        with self._lock:
            return [self._tasks[task_id].model_copy() for task_id in sorted(self._tasks)]

    def create_task(self, payload: TaskCreate) -> Task:
        title = require_title(payload.title)
        now = datetime.now(UTC)
        with self._lock:
            record = Task(
                id=next(self._ids),
                title=title,
                description=payload.description,
                created_at=now,
                updated_at=now,
            )
            self._tasks[record.id] = record
        return record.model_copy()

    def get_task(self, task_id: int) -> Task | None:
        with self._lock:
            task = self._tasks.get(task_id)
        return task.model_copy() if task else None

    def update_task(self, task_id: int, changes: TaskUpdate) -> Task:
        supplied = changes.changes()
        if "title" in supplied:
            require_title(supplied["title"])
        with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                raise TaskNotFoundError(task_id)
            updated = current.model_copy(
                update={**supplied, "updated_at": datetime.now(UTC)}
            )
            self._tasks[task_id] = updated
        return updated.model_copy()

    def delete_task(self, task_id: int) -> None:
        with self._lock:
            if task_id not in self._tasks:
                raise TaskNotFoundError(task_id)
            del self._tasks[task_id]
