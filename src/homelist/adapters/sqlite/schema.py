"""Database schema definitions for the task store."""

from __future__ import annotations

SCHEMA_VERSION = 1

# Tasks are ordered by position descending; ties break on id.
CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    completed BOOLEAN NOT NULL DEFAULT 0,
    author_id TEXT,
    type TEXT NOT NULL DEFAULT 'task',
    position REAL NOT NULL,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
)
"""

CREATE_TASKS_POSITION_INDEX = """
CREATE INDEX IF NOT EXISTS idx_tasks_position ON tasks(position DESC, id)
"""

CREATE_TASKS_AUTHOR_INDEX = """
CREATE INDEX IF NOT EXISTS idx_tasks_author ON tasks(author_id)
"""

ALL_INDEXES = [
    CREATE_TASKS_POSITION_INDEX,
    CREATE_TASKS_AUTHOR_INDEX,
]
