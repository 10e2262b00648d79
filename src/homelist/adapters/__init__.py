"""Adapters module - TaskRepository implementations for different backends.

- sqlite: Server-side SQLite storage
- rest_api: Client-side access to a running task service
"""

from .rest_api import RestApiTaskRepository
from .sqlite import SqliteTaskRepository

__all__ = [
    "SqliteTaskRepository",
    "RestApiTaskRepository",
]
