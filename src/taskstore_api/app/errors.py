"""Error taxonomy raised by storage backends and mapped to HTTP status codes in main.py."""

from __future__ import annotations


class TaskStoreError(Exception):
    """Base class for task store failures."""


class TaskValidationError(TaskStoreError):
    """Malformed or missing required input (HTTP 422)."""


class TaskNotFoundError(TaskStoreError):
    """Identifier does not resolve to a stored task (HTTP 404)."""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task {task_id} does not exist")
        self.task_id = task_id


class InternalStoreError(TaskStoreError):
    """Storage failure (HTTP 500). The message is logged, never returned to callers."""
