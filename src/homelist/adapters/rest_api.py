"""REST API adapter - TaskRepository backed by the Homelist task service.

The reconciler only understands domain errors, so every transport failure is
translated here: HTTP error responses become the error matching their
status code, and connection problems become RemoteMutationError.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from homelist.models import Task, TaskContentUpdate, TaskCreate, TaskPage
from homelist.models.exceptions import RemoteMutationError, error_for_status
from homelist.repositories import TaskRepository
from homelist.services.api.client import APIClient
from homelist.services.api.tasks import TasksAPI


def _error_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("error", "detail", "message"):
            if isinstance(body.get(key), str):
                return body[key]
    return response.reason_phrase


@asynccontextmanager
async def translate_errors() -> AsyncIterator[None]:
    """Re-raise httpx failures as domain errors."""
    try:
        yield
    except httpx.HTTPStatusError as e:
        raise error_for_status(
            e.response.status_code, _error_message(e.response)
        ) from e
    except httpx.RequestError as e:
        raise RemoteMutationError(f"Task service unreachable: {e}") from e


class RestApiTaskRepository(TaskRepository):
    """Task repository implementation using REST API."""

    def __init__(self, client: APIClient | None = None):
        self._client = client
        self._tasks_api: TasksAPI | None = None

    @property
    def tasks_api(self) -> TasksAPI:
        """Get or create TasksAPI instance."""
        if self._tasks_api is None:
            if self._client is None:
                self._client = APIClient()
            self._tasks_api = TasksAPI(self._client)
        return self._tasks_api

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    async def list_page(self, limit: int, cursor: str | None = None) -> TaskPage:
        async with translate_errors():
            result = await self.tasks_api.get_infinite_tasks(limit, cursor)
        return TaskPage.model_validate(result)

    async def get(self, task_id: str) -> Task:
        async with translate_errors():
            result = await self.tasks_api.get_task(task_id)
        return Task(**result)

    async def add(self, task_data: TaskCreate) -> Task:
        async with translate_errors():
            result = await self.tasks_api.create_task(
                task_data.title,
                description=task_data.description,
                task_type=task_data.type,
                author_id=task_data.author_id,
            )
        return Task(**result)

    async def update_status(self, task_id: str, completed: bool) -> Task:
        async with translate_errors():
            result = await self.tasks_api.update_task_status(task_id, completed)
        return Task(**result)

    async def update_position(self, task_id: str, position: float) -> Task:
        async with translate_errors():
            result = await self.tasks_api.update_task_position(task_id, position)
        return Task(**result)

    async def update_content(self, task_id: str, updates: TaskContentUpdate) -> Task:
        async with translate_errors():
            result = await self.tasks_api.update_task(
                task_id, **updates.model_dump(exclude_none=True)
            )
        return Task(**result)

    async def delete(self, task_id: str) -> Task:
        async with translate_errors():
            result = await self.tasks_api.delete_task(task_id)
        return Task(**result)
