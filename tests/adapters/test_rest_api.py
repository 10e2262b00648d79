"""Unit tests for the REST API task repository.

All API calls are mocked via AsyncMock so no real HTTP traffic is made.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from homelist.adapters.rest_api import RestApiTaskRepository, translate_errors
from homelist.models import TaskContentUpdate, TaskCreate
from homelist.models.exceptions import (
    InvalidInputError,
    NotFoundError,
    RemoteMutationError,
    UnauthorizedError,
)
from homelist.services.api.tasks import TasksAPI


def _task_dict(**kwargs) -> dict:
    base = {
        "id": "task-001",
        "title": "Buy milk #groceries",
        "description": "",
        "completed": False,
        "author_id": "u1",
        "type": "task",
        "position": 1024.0,
    }
    base.update(kwargs)
    return base


def _status_error(status: int, body) -> httpx.HTTPStatusError:
    request = httpx.Request("PATCH", "http://127.0.0.1:8000/v1/tasks/x")
    response = httpx.Response(status, json=body, request=request)
    return httpx.HTTPStatusError("failed", request=request, response=response)


@pytest.fixture
def tasks_api():
    return MagicMock(spec=TasksAPI)


@pytest.fixture
def repo(tasks_api):
    repository = RestApiTaskRepository(MagicMock())
    repository._tasks_api = tasks_api
    return repository


@pytest.mark.asyncio
async def test_list_page_reads_next_cursor(repo, tasks_api):
    tasks_api.get_infinite_tasks = AsyncMock(
        return_value={"items": [_task_dict()], "nextCursor": "task-000"}
    )

    page = await repo.list_page(8)

    assert [t.id for t in page.items] == ["task-001"]
    assert page.next_cursor == "task-000"
    tasks_api.get_infinite_tasks.assert_awaited_once_with(8, None)


@pytest.mark.asyncio
async def test_add_passes_fields(repo, tasks_api):
    tasks_api.create_task = AsyncMock(return_value=_task_dict(type="shopping"))

    task = await repo.add(TaskCreate(title="Eggs", type="shopping", author_id="u1"))

    assert task.type == "shopping"
    tasks_api.create_task.assert_awaited_once_with(
        "Eggs", description="", task_type="shopping", author_id="u1"
    )


@pytest.mark.asyncio
async def test_update_position(repo, tasks_api):
    tasks_api.update_task_position = AsyncMock(return_value=_task_dict(position=1054.0))

    task = await repo.update_position("task-001", 1054.0)

    assert task.position == 1054.0


@pytest.mark.asyncio
async def test_update_content_sends_only_given_fields(repo, tasks_api):
    tasks_api.update_task = AsyncMock(return_value=_task_dict(title="New"))

    await repo.update_content("task-001", TaskContentUpdate(title="New"))

    tasks_api.update_task.assert_awaited_once_with("task-001", title="New")


@pytest.mark.asyncio
async def test_delete_returns_removed_task(repo, tasks_api):
    tasks_api.delete_task = AsyncMock(return_value=_task_dict())

    task = await repo.delete("task-001")

    assert task.id == "task-001"


@pytest.mark.asyncio
async def test_not_found_is_translated(repo, tasks_api):
    tasks_api.update_task_status = AsyncMock(
        side_effect=_status_error(404, {"error": "Task not found: x"})
    )

    with pytest.raises(NotFoundError, match="Task not found: x"):
        await repo.update_status("x", True)


@pytest.mark.asyncio
async def test_connection_error_is_translated(repo, tasks_api):
    tasks_api.delete_task = AsyncMock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(RemoteMutationError, match="unreachable"):
        await repo.delete("x")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,body,error,message",
    [
        (400, {"detail": "limit must be between 1 and 100"}, InvalidInputError, "limit"),
        (401, {"error": "Unauthorized"}, UnauthorizedError, "Unauthorized"),
        (500, {"message": "Internal server error"}, RemoteMutationError, "Internal"),
        (502, ["unexpected"], RemoteMutationError, "Bad Gateway"),
    ],
)
async def test_translate_errors(status, body, error, message):
    with pytest.raises(error, match=message):
        async with translate_errors():
            raise _status_error(status, body)
