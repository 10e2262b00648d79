"""Utility functions for SQLite adapter."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any


def generate_uuid() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    """Get current timestamp in ISO format."""
    return datetime.now(UTC).isoformat()


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary.

    Args:
        row: sqlite3.Row object

    Returns:
        Dictionary with column names as keys
    """
    if row is None:
        return {}
    return dict(row)


def row_to_task_dict(row: Any) -> dict[str, Any]:
    """Convert a tasks row to Task fields (SQLite stores booleans as 0/1)."""
    data = row_to_dict(row)
    if "completed" in data:
        data["completed"] = bool(data["completed"])
    return data
