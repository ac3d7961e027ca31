"""Database connection management for the SQLite store.

Provides a process-wide connection (WAL mode, foreign keys on) for the
server and CLI, and a plain factory for isolated connections in tests.
"""

from __future__ import annotations

import atexit
import os
import sqlite3
from pathlib import Path

from platformdirs import user_data_dir

from tasknest.adapters.sqlite.migrations import ALL_MIGRATIONS, MigrationRunner
from tasknest.adapters.sqlite.utils import fold_case

MEMORY = ":memory:"


def default_db_path() -> Path:
    """Default database file inside the user data directory."""
    return Path(user_data_dir("tasknest")) / "tasknest.db"


def create_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Open a new connection and bring its schema up to date.

    Args:
        db_path: Database file, ``":memory:"`` for a private in-memory
            database, or None for the default location

    Returns:
        Configured sqlite3.Connection
    """
    if db_path is None:
        db_path = default_db_path()

    is_new_database = False
    if str(db_path) != MEMORY:
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        is_new_database = not db_path.exists()

    connection = sqlite3.connect(
        str(db_path),
        check_same_thread=False,  # FastAPI may run handlers on other threads
        timeout=30.0,
    )
    connection.row_factory = sqlite3.Row
    connection.create_function("casefold", 1, fold_case, deterministic=True)
    connection.execute("PRAGMA foreign_keys = ON")
    if str(db_path) != MEMORY:
        connection.execute("PRAGMA journal_mode = WAL")

    if is_new_database:
        os.chmod(db_path, 0o600)

    MigrationRunner(connection).run_migrations(ALL_MIGRATIONS)
    return connection


class DatabaseConnection:
    """Singleton connection manager for the store.

    One connection per process, reopened if a different path is requested,
    closed on interpreter exit.
    """

    _instance: DatabaseConnection | None = None
    _connection: sqlite3.Connection | None = None
    _db_path: Path | None = None

    def __new__(cls) -> DatabaseConnection:
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            atexit.register(cls.close_connection)
        return cls._instance

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Get or create the shared database connection."""
        instance = cls()
        db_path = default_db_path() if db_path is None else Path(db_path)

        if instance._connection is not None and instance._db_path == db_path:
            return instance._connection

        if instance._connection is not None:
            instance._connection.close()

        instance._connection = create_connection(db_path)
        instance._db_path = db_path
        return instance._connection

    @classmethod
    def close_connection(cls) -> None:
        """Close database connection gracefully."""
        instance = cls()
        if instance._connection is not None:
            try:
                instance._connection.commit()
                instance._connection.close()
            except sqlite3.Error:
                pass  # interpreter is shutting down
            finally:
                instance._connection = None
                instance._db_path = None


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Helper function to get the shared database connection."""
    return DatabaseConnection.get_connection(db_path)
