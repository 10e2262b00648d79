"""HTTP service: task API, shared-secret endpoints and the event stream."""

from __future__ import annotations

import hmac
import re

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from homelist import __version__
from homelist.adapters.sqlite import SqliteTaskRepository
from homelist.models import (
    Task,
    TaskContentUpdate,
    TaskCreate,
    TaskPage,
    TaskPositionUpdate,
    TaskStatusUpdate,
)
from homelist.models.exceptions import HomelistError, InvalidInputError, UnauthorizedError
from homelist.services.config_service import ConfigService, get_config_service
from homelist.services.event_broker import EventBroker
from homelist.services.task_service import TaskService, validate_task_id
from homelist.utils.logger import get_logger

logger = get_logger("server")

CHANNEL_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def _error_response(error: HomelistError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


def _check_secret(expected: str | None, authorization: str | None) -> None:
    """Accept the raw secret or ``Bearer <secret>``; no configured secret rejects all."""
    if not expected or not authorization:
        raise UnauthorizedError("Unauthorized")
    supplied = authorization.removeprefix("Bearer ").strip()
    if not hmac.compare_digest(supplied.encode(), expected.encode()):
        raise UnauthorizedError("Unauthorized")


async def _read_content_update(request: Request) -> TaskContentUpdate:
    """Parse the edit body; only called once the caller is authorized."""
    try:
        return TaskContentUpdate.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        raise InvalidInputError("Invalid body") from e


def create_app(service: TaskService, *, edit_secret: str | None = None) -> FastAPI:
    """Build the FastAPI application around a task service.

    Args:
        service: Task service backing every route
        edit_secret: Shared secret of the ``/api/tasks`` endpoints
    """
    app = FastAPI(title="homelist", version=__version__)
    app.state.service = service
    app.state.edit_secret = edit_secret

    def get_service(request: Request) -> TaskService:
        return request.app.state.service

    @app.exception_handler(HomelistError)
    async def homelist_error_handler(request: Request, exc: HomelistError) -> JSONResponse:
        logger.info(
            "%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message
        )
        return _error_response(exc)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    # ------------------------------------------------------------------
    # Task API
    # ------------------------------------------------------------------

    @app.get("/v1/tasks", response_model=TaskPage, response_model_by_alias=True)
    async def list_tasks(
        limit: int = Query(8),
        cursor: str | None = Query(None),
        tasks: TaskService = Depends(get_service),
    ) -> TaskPage:
        return await tasks.list_page(limit, cursor)

    @app.get("/v1/tasks/{task_id}", response_model=Task)
    async def get_task(task_id: str, tasks: TaskService = Depends(get_service)) -> Task:
        return await tasks.get_task(task_id)

    @app.post("/v1/tasks", response_model=Task, status_code=201)
    async def create_task(
        task_data: TaskCreate, tasks: TaskService = Depends(get_service)
    ) -> Task:
        return await tasks.create_task(task_data)

    @app.patch("/v1/tasks/{task_id}/status", response_model=Task)
    async def update_status(
        task_id: str, body: TaskStatusUpdate, tasks: TaskService = Depends(get_service)
    ) -> Task:
        return await tasks.update_status(task_id, body.completed)

    @app.patch("/v1/tasks/{task_id}/position", response_model=Task)
    async def update_position(
        task_id: str, body: TaskPositionUpdate, tasks: TaskService = Depends(get_service)
    ) -> Task:
        return await tasks.update_position(task_id, body.position)

    @app.patch("/v1/tasks/{task_id}", response_model=Task)
    async def update_content(
        task_id: str, body: TaskContentUpdate, tasks: TaskService = Depends(get_service)
    ) -> Task:
        return await tasks.update_content(task_id, body)

    @app.delete("/v1/tasks/{task_id}", response_model=Task)
    async def delete_task(task_id: str, tasks: TaskService = Depends(get_service)) -> Task:
        return await tasks.delete_task(task_id)

    # ------------------------------------------------------------------
    # Shared-secret endpoints for integrations
    # ------------------------------------------------------------------

    @app.put("/api/tasks/edit/{task_id}")
    async def edit_task_external(
        request: Request,
        task_id: str,
        authorization: str | None = Header(None),
    ):
        try:
            _check_secret(request.app.state.edit_secret, authorization)
            validate_task_id(task_id)
            body = await _read_content_update(request)
            await request.app.state.service.update_content(task_id, body, external=True)
        except HomelistError as e:
            return _error_response(e)
        except Exception:
            logger.exception("external edit of %s failed", task_id)
            return JSONResponse(status_code=500, content={"message": "Internal server error"})
        return "Task updated"

    @app.delete("/api/tasks/delete/{task_id}")
    async def delete_task_external(
        request: Request,
        task_id: str,
        authorization: str | None = Header(None),
    ):
        try:
            _check_secret(request.app.state.edit_secret, authorization)
            validate_task_id(task_id)
            await request.app.state.service.delete_task(task_id, external=True)
        except HomelistError as e:
            return _error_response(e)
        except Exception:
            logger.exception("external delete of %s failed", task_id)
            return JSONResponse(status_code=500, content={"message": "Internal server error"})
        return "Task deleted"

    # ------------------------------------------------------------------
    # Real-time channel
    # ------------------------------------------------------------------

    @app.get("/v1/channels/{channel}/events")
    async def channel_events(channel: str, request: Request) -> StreamingResponse:
        """Server-sent events of one channel.

        Each frame is ``event: <name>`` followed by the JSON payload.
        """
        if not CHANNEL_PATTERN.match(channel):
            raise InvalidInputError("Invalid channel")
        broker: EventBroker = request.app.state.service.broker
        return StreamingResponse(
            broker.stream(channel),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache"},
        )

    return app


def build_app(config_service: ConfigService | None = None) -> FastAPI:
    """Wire the application from configuration: SQLite store, broker, secret."""
    config_service = config_service or get_config_service()
    config = config_service.config
    repository = SqliteTaskRepository(str(config_service.get_db_path()))
    service = TaskService(repository, EventBroker(), channel=config.realtime.channel)
    return create_app(service, edit_secret=config_service.get_edit_secret())
