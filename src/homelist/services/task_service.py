"""Task service - server-side business logic for task operations.

Sits between the HTTP routes and the task repository. Every mutation that
other clients must see is published on the household channel once the
repository has confirmed it.
"""

from __future__ import annotations

import re

from homelist.models import Task, TaskContentUpdate, TaskCreate, TaskPage
from homelist.models.events import TaskCreated, TaskDeleted, TaskUpdated
from homelist.models.exceptions import InvalidInputError
from homelist.repositories import TaskRepository, decode_cursor
from homelist.utils.logger import get_logger

from .event_broker import EventBroker

DEFAULT_CHANNEL = "user-household"
MAX_PAGE_SIZE = 100

_TASK_ID = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_task_id(task_id: str | None) -> str:
    """Return the id unchanged, or raise InvalidInputError("Invalid id")."""
    if not task_id or not _TASK_ID.match(task_id):
        raise InvalidInputError("Invalid id")
    return task_id


class TaskService:
    """Service for task business logic."""

    def __init__(
        self,
        task_repository: TaskRepository,
        broker: EventBroker | None = None,
        *,
        channel: str = DEFAULT_CHANNEL,
    ):
        """Initialize the task service.

        Args:
            task_repository: TaskRepository implementation for data access
            broker: Receives the events of confirmed mutations
            channel: Channel the events are published on
        """
        self.repository = task_repository
        self.broker = broker or EventBroker()
        self.channel = channel
        self.logger = get_logger("tasks")

    async def list_page(self, limit: int, cursor: str | None = None) -> TaskPage:
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise InvalidInputError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if cursor is not None:
            decode_cursor(cursor)
        return await self.repository.list_page(limit, cursor)

    async def get_task(self, task_id: str) -> Task:
        return await self.repository.get(validate_task_id(task_id))

    async def create_task(self, task_data: TaskCreate) -> Task:
        """Create a task on top of the list and announce it."""
        task = await self.repository.add(task_data)
        self.logger.info("created task %s at position %s", task.id, task.position)
        self.broker.publish(self.channel, TaskCreated(task=task))
        return task

    async def update_status(self, task_id: str, completed: bool) -> Task:
        task = await self.repository.update_status(validate_task_id(task_id), completed)
        self.broker.publish(self.channel, TaskUpdated(task=task))
        return task

    async def update_position(self, task_id: str, position: float) -> Task:
        """Store a new sort key.

        Reorders are not broadcast; other clients pick them up on their next
        fetch.
        """
        return await self.repository.update_position(validate_task_id(task_id), position)

    async def update_content(
        self, task_id: str, updates: TaskContentUpdate, *, external: bool = False
    ) -> Task:
        """Change title and/or description.

        Args:
            task_id: Task to edit
            updates: Fields to replace
            external: The edit came through the shared-secret endpoint and
                is announced as ``api-task-updated``
        """
        task = await self.repository.update_content(validate_task_id(task_id), updates)
        name = "api-task-updated" if external else "task-updated"
        self.broker.publish(self.channel, TaskUpdated(name=name, task=task))
        return task

    async def delete_task(self, task_id: str, *, external: bool = False) -> Task:
        task = await self.repository.delete(validate_task_id(task_id))
        self.logger.info("deleted task %s", task.id)
        name = "api-task-deleted" if external else "task-deleted"
        self.broker.publish(self.channel, TaskDeleted(name=name, task=task))
        return task
