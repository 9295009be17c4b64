"""FastAPI application wiring for the task store service.

Beginner terms used in this file:
- FastAPI app: the main web application object.
- Route/path operation: a function exposed over HTTP (for example, GET /tasks).
- response_model: Pydantic model used to validate/shape API responses.
- Lifespan: code that runs once when the server starts (here: open storage).
- Exception handler: turns a Python exception into an HTTP response.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .app.errors import InternalStoreError, TaskNotFoundError, TaskValidationError
from .app.memory import InMemoryTaskStorage
from .app.models import Task, TaskCreate, TaskUpdate
from .app.settings import Settings, get_settings
from .app.storage import PostgresTaskStorage, TaskStorage
from .logging_setup import configure_logging

logger = logging.getLogger(__name__)

GENERIC_ERROR_DETAIL = "Internal server error"


def _build_storage(settings: Settings) -> TaskStorage:
    if settings.storage_backend == "memory":
        return InMemoryTaskStorage()
    database_url = settings.resolved_database_url()
    if not database_url:
        raise RuntimeError(
            "Missing database URL. Set TASKSTORE_DATABASE_URL "
            "or DATABASE_URL before starting the app."
        )
    return PostgresTaskStorage(database_url)


def _ensure_runtime_state(
    app: FastAPI,
    *,
    settings: Settings,
    storage_override: TaskStorage | None,
) -> None:
    if not hasattr(app.state, "storage"):
        app.state.storage = storage_override or _build_storage(settings)
        # Ensure schema exists before serving requests.
        app.state.storage.migrate()

    if not hasattr(app.state, "settings"):
        app.state.settings = settings


def create_app(
    *,
    storage: TaskStorage | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    """Application factory.

    Tests pass an in-memory ``storage`` so no database is needed; production
    builds the configured backend in the lifespan hook.
    """
    settings = settings_override or get_settings()
    logging.getLogger("taskstore_api").setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _ensure_runtime_state(app, settings=settings, storage_override=storage)
        yield

    app_lifespan = lifespan if storage is None else None
    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=app_lifespan)

    # Keep test paths reliable when lifespan is not executed by the client.
    if storage is not None:
        _ensure_runtime_state(app, settings=settings, storage_override=storage)

    def _get_task_storage(request: Request) -> TaskStorage:
        if not hasattr(request.app.state, "storage"):
            _ensure_runtime_state(request.app, settings=settings, storage_override=storage)
        return request.app.state.storage

    @app.exception_handler(TaskNotFoundError)
    async def handle_not_found(_: Request, exc: TaskNotFoundError) -> JSONResponse:
        logger.info("task_api event=not_found task_id=%s", exc.task_id)
        return JSONResponse(status_code=404, content={"detail": "Task not found"})

    @app.exception_handler(TaskValidationError)
    async def handle_validation(_: Request, exc: TaskValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.exception_handler(InternalStoreError)
    async def handle_internal(request: Request, exc: InternalStoreError) -> JSONResponse:
        logger.error(
            "task_api event=store_failure method=%s path=%s reason=%s",
            request.method,
            request.url.path,
            exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": GENERIC_ERROR_DETAIL},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "task_api event=unhandled_error method=%s path=%s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": GENERIC_ERROR_DETAIL},
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name}

    @app.get("/tasks", response_model=list[Task])
    def list_tasks(request: Request) -> list[Task]:
        return _get_task_storage(request).list_tasks()

    # Request body is validated against TaskCreate (422 on missing/blank title).
    @app.post("/tasks", response_model=Task, status_code=201)
    def create_task(payload: TaskCreate, request: Request) -> Task:
        task = _get_task_storage(request).create_task(payload)
        logger.info("task_api event=created task_id=%s", task.id)
        return task

    @app.get("/tasks/{task_id}", response_model=Task)
    def get_task(task_id: int, request: Request) -> Task:
        task = _get_task_storage(request).get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    @app.put("/tasks/{task_id}", response_model=Task)
    def update_task(task_id: int, payload: TaskUpdate, request: Request) -> Task:
        task = _get_task_storage(request).update_task(task_id, payload)
        logger.info(
            "task_api event=updated task_id=%s fields=%s",
            task_id,
            sorted(payload.changes()),
        )
        return task

    @app.delete("/tasks/{task_id}", status_code=204)
    def delete_task(task_id: int, request: Request) -> Response:
        _get_task_storage(request).delete_task(task_id)
        logger.info("task_api event=deleted task_id=%s", task_id)
        return Response(status_code=204)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run("taskstore_api.main:app", host=settings.host, port=settings.port)


# Module-level app for `uvicorn taskstore_api.main:app`.
app = create_app()
