"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/API state.
"""

from __future__ import annotations

import os
import tempfile

# platformdirs honours the XDG variables; keep log/config/data files of
# imported modules out of the real home directory.
_XDG_ROOT = tempfile.mkdtemp(prefix="homelist-tests-")
for _var in ("XDG_STATE_HOME", "XDG_CONFIG_HOME", "XDG_DATA_HOME", "XDG_CACHE_HOME"):
    os.environ[_var] = os.path.join(_XDG_ROOT, _var.lower())

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402

from homelist.models import Task, TaskContentUpdate, TaskCreate, TaskPage  # noqa: E402
from homelist.models.exceptions import NotFoundError  # noqa: E402
from homelist.repositories import TaskRepository, decode_cursor, encode_cursor  # noqa: E402


def make_task(task_id: str, position: float = 0.0, **fields) -> Task:
    """Build a task with sensible defaults."""
    fields.setdefault("title", f"Task {task_id}")
    return Task(id=task_id, position=position, **fields)


class InMemoryTaskRepository(TaskRepository):
    """TaskRepository keeping tasks in a list ordered by position descending.

    Records every call in ``calls`` and raises ``fail_with`` (if set) from
    mutations.
    """

    def __init__(self, tasks: list[Task] | None = None):
        self.tasks: list[Task] = sorted(tasks or [], key=lambda t: -t.position)
        self.calls: list[tuple] = []
        self.fail_with: Exception | None = None
        self.fail_list_with: Exception | None = None
        self._next_id = 1000

    def _index(self, task_id: str) -> int:
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                return index
        raise NotFoundError(f"Task not found: {task_id}")

    def _mutating(self, *call) -> None:
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    async def list_page(self, limit: int, cursor: str | None = None) -> TaskPage:
        self.calls.append(("list_page", limit, cursor))
        if self.fail_list_with is not None:
            raise self.fail_list_with
        ordered = sorted(self.tasks, key=lambda t: (-t.position, t.id))
        if cursor is not None:
            position, task_id = decode_cursor(cursor)
            ordered = [
                t
                for t in ordered
                if t.position < position or (t.position == position and t.id >= task_id)
            ]
        items, rest = ordered[:limit], ordered[limit:]
        return TaskPage(items=items, next_cursor=encode_cursor(rest[0]) if rest else None)

    async def get(self, task_id: str) -> Task:
        return self.tasks[self._index(task_id)]

    async def add(self, task_data: TaskCreate) -> Task:
        self._mutating("add", task_data.title)
        self._next_id += 1
        top = max((t.position for t in self.tasks), default=0.0)
        task = Task(
            id=f"new-{self._next_id}",
            position=top + 1024,
            **task_data.model_dump(),
        )
        self.tasks.insert(0, task)
        return task

    def _update(self, task_id: str, **fields) -> Task:
        index = self._index(task_id)
        self.tasks[index] = self.tasks[index].model_copy(update=fields)
        return self.tasks[index]

    async def update_status(self, task_id: str, completed: bool) -> Task:
        self._mutating("update_status", task_id, completed)
        return self._update(task_id, completed=completed)

    async def update_position(self, task_id: str, position: float) -> Task:
        self._mutating("update_position", task_id, position)
        return self._update(task_id, position=position)

    async def update_content(self, task_id: str, updates: TaskContentUpdate) -> Task:
        self._mutating("update_content", task_id)
        return self._update(task_id, **updates.model_dump(exclude_none=True))

    async def delete(self, task_id: str) -> Task:
        self._mutating("delete", task_id)
        return self.tasks.pop(self._index(task_id))

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


class RecordingNotifier:
    """Notifier keeping messages instead of printing them."""

    def __init__(self):
        self.successes: list[tuple[str, str]] = []
        self.errors: list[tuple[str, str]] = []

    def success(self, title: str, message: str) -> None:
        self.successes.append((title, message))

    def error(self, title: str, message: str) -> None:
        self.errors.append((title, message))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def repository() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def tmp_config(tmp_path, monkeypatch):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only and
    installs the instance as the cached ``get_config_service()`` result.
    """
    from homelist.services.config_service import get_config_service

    monkeypatch.delenv("HOMELIST_EDIT_SECRET", raising=False)
    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    with patch("homelist.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("homelist.services.config_service.user_data_dir", return_value=tmpdir):
            svc = get_config_service()
            yield svc
    get_config_service.cache_clear()


@pytest.fixture()
def sqlite_repository(tmp_path):
    """SqliteTaskRepository on a fresh database file."""
    from homelist.adapters.sqlite.connection import DatabaseConnection
    from homelist.adapters.sqlite.task_repository import SqliteTaskRepository

    repo = SqliteTaskRepository(str(tmp_path / "tasks.db"))
    yield repo
    DatabaseConnection.close_connection()
