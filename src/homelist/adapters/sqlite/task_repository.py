"""SQLite implementation of TaskRepository."""

from __future__ import annotations

import sqlite3
from typing import Any

from homelist.adapters.sqlite.connection import get_connection
from homelist.adapters.sqlite.utils import generate_uuid, now_iso, row_to_task_dict
from homelist.models import Task, TaskContentUpdate, TaskCreate, TaskPage
from homelist.models.exceptions import NotFoundError
from homelist.repositories import TaskRepository, decode_cursor, encode_cursor
from homelist.services.position_allocator import INCREMENT

ORDER_BY = "ORDER BY position DESC, id ASC"


class SqliteTaskRepository(TaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, db_path: str | None = None):
        """Initialize SQLite task repository.

        Args:
            db_path: Optional database file path. If None, uses default location.
        """
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    def _fetch_row(self, task_id: str) -> sqlite3.Row:
        row = self.connection.execute(
            "SELECT * FROM tasks WHERE id = ?", (task_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"Task not found: {task_id}")
        return row

    async def list_page(self, limit: int, cursor: str | None = None) -> TaskPage:
        """List one page starting at the cursor's ``(position, id)`` boundary."""
        query = "SELECT * FROM tasks"
        params: list[Any] = []

        if cursor:
            position, task_id = decode_cursor(cursor)
            query += " WHERE position < ? OR (position = ? AND id >= ?)"
            params.extend([position, position, task_id])

        # one extra row tells whether another page follows
        query += f" {ORDER_BY} LIMIT ?"
        params.append(limit + 1)

        rows = self.connection.execute(query, params).fetchall()
        items = [Task(**row_to_task_dict(row)) for row in rows[:limit]]
        next_cursor = (
            encode_cursor(Task(**row_to_task_dict(rows[limit]))) if len(rows) > limit else None
        )
        return TaskPage(items=items, next_cursor=next_cursor)

    async def get(self, task_id: str) -> Task:
        return Task(**row_to_task_dict(self._fetch_row(task_id)))

    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task on top of the list."""
        task_id = generate_uuid()
        now = now_iso()

        top = self.connection.execute("SELECT MAX(position) FROM tasks").fetchone()[0]
        position = INCREMENT if top is None else top + INCREMENT

        self.connection.execute(
            """INSERT INTO tasks (
                id, title, description, completed, author_id, type,
                position, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                task_id,
                task_data.title,
                task_data.description,
                False,
                task_data.author_id,
                task_data.type,
                position,
                now,
                now,
            ),
        )
        self.connection.commit()
        return await self.get(task_id)

    def _update(self, task_id: str, fields: dict[str, Any]) -> None:
        self._fetch_row(task_id)
        fields = {**fields, "updated_at": now_iso()}
        assignments = ", ".join(f"{column} = ?" for column in fields)
        self.connection.execute(
            f"UPDATE tasks SET {assignments} WHERE id = ?",
            [*fields.values(), task_id],
        )
        self.connection.commit()

    async def update_status(self, task_id: str, completed: bool) -> Task:
        self._update(task_id, {"completed": completed})
        return await self.get(task_id)

    async def update_position(self, task_id: str, position: float) -> Task:
        self._update(task_id, {"position": position})
        return await self.get(task_id)

    async def update_content(self, task_id: str, updates: TaskContentUpdate) -> Task:
        update_dict = updates.model_dump(exclude_none=True)
        if not update_dict:
            return await self.get(task_id)
        self._update(task_id, update_dict)
        return await self.get(task_id)

    async def delete(self, task_id: str) -> Task:
        task = await self.get(task_id)
        self.connection.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        self.connection.commit()
        return task
