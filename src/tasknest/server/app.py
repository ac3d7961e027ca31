"""TaskNest API - FastAPI application factory.

Wires the SQLite repositories, the task store service and the activity
observer onto ``app.state``, maps TaskNestError to ``{"message": ...}``
responses, and mounts the router under ``/api``.
"""

from __future__ import annotations

import sqlite3
import time
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tasknest import __version__
from tasknest.adapters.sqlite import (
    SqliteActivityRepository,
    SqliteProjectRepository,
    SqliteTaskRepository,
    get_connection,
)
from tasknest.exceptions import TaskNestError
from tasknest.models.config_models import ServerConfig
from tasknest.server.routes import router
from tasknest.services.activity_service import ActivityService, RepositoryActivityObserver
from tasknest.services.task_service import TaskStoreService
from tasknest.utils.dates import utc_now
from tasknest.utils.logger import get_logger


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def create_app(
    config: ServerConfig | None = None,
    connection: sqlite3.Connection | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """Build the API application.

    Args:
        config: Server settings (database path, CORS origins)
        connection: Open database connection; the shared connection for
            ``config.db_path`` is used if None
        clock: Source of "now" for timestamps and due-date windows
    """
    config = config or ServerConfig()
    if connection is None:
        connection = get_connection(config.db_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        get_logger().info("TaskNest API started")
        yield
        get_logger().info("TaskNest API shutting down")

    app = FastAPI(title="TaskNest", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    task_repository = SqliteTaskRepository(connection, clock)
    project_repository = SqliteProjectRepository(connection, clock)
    activity_repository = SqliteActivityRepository(connection, clock)

    app.state.connection = connection
    app.state.project_repository = project_repository
    app.state.activity_service = ActivityService(activity_repository)
    app.state.task_service = TaskStoreService(
        task_repository,
        project_repository,
        observers=[RepositoryActivityObserver(activity_repository)],
        clock=clock,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        get_logger().info(
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.monotonic() - start) * 1000,
        )
        return response

    @app.exception_handler(TaskNestError)
    async def handle_tasknest_error(request: Request, exc: TaskNestError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    app.include_router(router, prefix="/api")
    return app


def run_server(host: str, port: int, db_path: str | None = None) -> None:
    """Serve the API with uvicorn until interrupted."""
    import uvicorn

    config = ServerConfig(host=host, port=port, db_path=db_path)
    uvicorn.run(create_app(config), host=host, port=port, log_level="info")
