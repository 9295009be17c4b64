"""Async HTTP client for the task store service.

Failure policy:
- create/get/update/delete let the underlying ``httpx`` error reach the caller
  (``httpx.HTTPStatusError`` for non-2xx responses, ``httpx.TransportError`` for
  network failures).
- list_tasks never raises for transport, HTTP or decoding failures: it logs a
  warning and returns an empty list, so "no tasks" and "fetch failed" look the
  same to its caller.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import TypeAdapter

from taskstore_api.app.models import Task, TaskCreate, TaskUpdate

from .settings import ClientSettings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0

_TASK_LIST = TypeAdapter(list[Task])


class TaskClient:
    """One independent request per call; no pooling, no retry."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        # Injected by tests (ASGITransport/MockTransport); None means real network.
        self._transport = transport

    async def list_tasks(self) -> list[Task]:
        try:
            response = await self._request("GET", self._url())
            return _TASK_LIST.validate_python(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("task_client event=list_failed url=%s reason=%r", self._url(), exc)
            return []

    async def get_task(self, task_id: int) -> Task:
        response = await self._request("GET", self._url(task_id))
        return Task.model_validate(response.json())

    async def create_task(self, fields: TaskCreate | Mapping[str, Any]) -> Task:
        payload = _as_model(TaskCreate, fields).model_dump()
        response = await self._request("POST", self._url(), json=payload)
        return Task.model_validate(response.json())

    async def update_task(self, task_id: int, fields: TaskUpdate | Mapping[str, Any]) -> Task:
        payload = _as_model(TaskUpdate, fields).changes()
        response = await self._request("PUT", self._url(task_id), json=payload)
        return Task.model_validate(response.json())

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", self._url(task_id))

    def _url(self, task_id: int | None = None) -> str:
        if task_id is None:
            return f"{self.base_url}/tasks"
        return f"{self.base_url}/tasks/{task_id}"

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        logger.debug("task_client event=request method=%s url=%s", method, url)
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            response = await client.request(method, url, json=json)
            response.raise_for_status()
        logger.debug(
            "task_client event=response method=%s url=%s status=%s",
            method,
            url,
            response.status_code,
        )
        return response


def _as_model(model: type[TaskCreate] | type[TaskUpdate], fields: Any) -> Any:
    if isinstance(fields, model):
        return fields
    return model.model_validate(dict(fields))


def build_client_from_env(*, timeout_s: float = DEFAULT_TIMEOUT_S) -> TaskClient:
    settings = ClientSettings()
    if not settings.api_base_url:
        raise RuntimeError("TASKSTORE_API_BASE_URL is required.")
    return TaskClient(settings.api_base_url, timeout_s=timeout_s)
