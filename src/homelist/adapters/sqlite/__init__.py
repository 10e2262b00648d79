"""SQLite adapter module - task storage for the task service."""

from homelist.adapters.sqlite.task_repository import SqliteTaskRepository

__all__ = [
    "SqliteTaskRepository",
]
