"""Homelist domain models.

This package contains Pydantic models that represent the core domain entities
of the Homelist application: tasks, shopping items, real-time events and
configuration.
"""

from .config_models import AppConfig
from .core import (
    DEFAULT_TASK_TYPE,
    SHOPPING_TYPE,
    CatalogItem,
    Category,
    ShoppingItem,
    Task,
    TaskContentUpdate,
    TaskCreate,
    TaskPage,
    TaskPositionUpdate,
    TaskStatusUpdate,
)
from .events import RealtimeEvent, parse_event

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskContentUpdate",
    "TaskStatusUpdate",
    "TaskPositionUpdate",
    "TaskPage",
    "DEFAULT_TASK_TYPE",
    "SHOPPING_TYPE",
    # Shopping models
    "Category",
    "CatalogItem",
    "ShoppingItem",
    # Events
    "RealtimeEvent",
    "parse_event",
    # Config models
    "AppConfig",
]
