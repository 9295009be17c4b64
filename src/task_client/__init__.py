"""Async HTTP client for the task store service."""

from task_client.client import DEFAULT_TIMEOUT_S, TaskClient, build_client_from_env
from task_client.settings import ClientSettings

__all__ = [
    "DEFAULT_TIMEOUT_S",
    "ClientSettings",
    "TaskClient",
    "build_client_from_env",
]
