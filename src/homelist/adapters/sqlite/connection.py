"""Database connection management for the task store.

One connection per process, in WAL mode, migrated to the latest schema on
first use.
"""

from __future__ import annotations

import atexit
import os
import sqlite3
from pathlib import Path

from homelist.adapters.sqlite.migrations.m001_initial_schema import initial_migration
from homelist.adapters.sqlite.migrations.runner import MigrationRunner
from homelist.services.config_service import get_config_service
from homelist.utils.logger import get_logger

logger = get_logger("sqlite")

MIGRATIONS = [
    initial_migration,
]


class DatabaseConnection:
    """Singleton connection manager for the SQLite task store."""

    _instance: DatabaseConnection | None = None
    _connection: sqlite3.Connection | None = None
    _db_path: Path | None = None

    def __new__(cls) -> DatabaseConnection:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Get or create database connection.

        Args:
            db_path: Path to database file. If None, uses the configured location.
                ``":memory:"`` opens a private in-memory database.

        Returns:
            sqlite3.Connection with row access by column name
        """
        instance = cls()

        if db_path is None:
            db_path = get_config_service().get_db_path()
        in_memory = str(db_path) == ":memory:"
        db_path = Path(db_path)

        if instance._connection is not None and instance._db_path == db_path:
            return instance._connection

        if instance._connection is not None:
            instance._connection.close()

        is_new_database = False
        if not in_memory:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            is_new_database = not db_path.exists()

        connection = sqlite3.connect(
            ":memory:" if in_memory else str(db_path),
            # the server runs handlers on the event loop and in threadpools
            check_same_thread=False,
            timeout=30.0,
        )
        connection.row_factory = sqlite3.Row
        if not in_memory:
            connection.execute("PRAGMA journal_mode = WAL")
            if is_new_database:
                os.chmod(db_path, 0o600)

        cls._run_migrations(connection)
        logger.info("opened task store at %s", db_path)

        instance._connection = connection
        instance._db_path = db_path
        atexit.register(cls.close_connection)
        return connection

    @classmethod
    def _run_migrations(cls, connection: sqlite3.Connection) -> None:
        MigrationRunner(connection).run_migrations(MIGRATIONS)

    @classmethod
    def close_connection(cls) -> None:
        """Close database connection."""
        instance = cls()
        if instance._connection is not None:
            try:
                instance._connection.commit()
                instance._connection.close()
            except sqlite3.Error as e:
                logger.warning("error closing task store: %s", e)
            finally:
                instance._connection = None
                instance._db_path = None

    @classmethod
    def get_db_path(cls) -> Path | None:
        return cls()._db_path


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    return DatabaseConnection.get_connection(db_path)
