"""Repository abstraction layer for Homelist.

The task repository is the port both sides of the application talk to: the
task service persists through the SQLite adapter, while the client-side
reconciler mutates through the REST adapter. Business logic stays unaware
of which one it holds.
"""

from __future__ import annotations

import base64
import binascii
import json
from abc import ABC, abstractmethod

from homelist.models import Task, TaskContentUpdate, TaskCreate, TaskPage
from homelist.models.exceptions import InvalidInputError


def encode_cursor(task: Task) -> str:
    """Cursor of the page starting at ``task``.

    The cursor carries the task's ``(position, id)`` boundary rather than a
    reference to the row, so it stays usable after that task is deleted.
    """
    raw = json.dumps([task.position, task.id], separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def decode_cursor(cursor: str) -> tuple[float, str]:
    """Return the ``(position, id)`` boundary of a cursor.

    Raises:
        InvalidInputError: If the cursor was not produced by encode_cursor
    """
    try:
        raw = base64.urlsafe_b64decode(cursor + "=" * (-len(cursor) % 4))
        position, task_id = json.loads(raw)
        return float(position), str(task_id)
    except (binascii.Error, ValueError, TypeError) as e:
        raise InvalidInputError("Invalid cursor") from e


class TaskRepository(ABC):
    """Abstract base class for task persistence operations."""

    @abstractmethod
    async def list_page(self, limit: int, cursor: str | None = None) -> TaskPage:
        """Fetch one page of tasks ordered by position descending.

        Args:
            limit: Maximum number of tasks in the page
            cursor: Boundary from encode_cursor; None for the first page

        Returns:
            TaskPage whose next_cursor points at the following page, if any

        Raises:
            InvalidInputError: If the cursor is malformed
        """
        raise NotImplementedError(
            "TaskRepository.list_page() must be implemented by adapter"
        )

    @abstractmethod
    async def get(self, task_id: str) -> Task:
        """Get a specific task by ID.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError("TaskRepository.get() must be implemented by adapter")

    @abstractmethod
    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task above every existing one.

        Returns:
            Created Task with generated ID, position and timestamps
        """
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def update_status(self, task_id: str, completed: bool) -> Task:
        """Set the completion flag.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError(
            "TaskRepository.update_status() must be implemented by adapter"
        )

    @abstractmethod
    async def update_position(self, task_id: str, position: float) -> Task:
        """Store a new sort key.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError(
            "TaskRepository.update_position() must be implemented by adapter"
        )

    @abstractmethod
    async def update_content(self, task_id: str, updates: TaskContentUpdate) -> Task:
        """Replace title and/or description.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError(
            "TaskRepository.update_content() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, task_id: str) -> Task:
        """Delete a task.

        Returns:
            The deleted task

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError(
            "TaskRepository.delete() must be implemented by adapter"
        )
