"""Forward-only schema migrations for the TaskNest store.

Applied versions are recorded in ``schema_version``; every connection
opened through ``create_connection`` is brought up to date before use.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod

from tasknest.utils.dates import to_storage, utc_now
from tasknest.utils.logger import get_logger

_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    description TEXT NOT NULL,
    applied_at TEXT NOT NULL
)
"""


class Migration(ABC):
    """One numbered schema change."""

    @property
    @abstractmethod
    def version(self) -> int:
        """Sequential version number, starting at 1."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Short summary recorded in ``schema_version``."""

    @abstractmethod
    def up(self, connection: sqlite3.Connection) -> None:
        """Apply the change. Must not commit."""


class MigrationRunner:
    """Applies pending migrations to a connection."""

    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection
        self.connection.execute(_VERSION_TABLE)
        self.connection.commit()

    def get_current_version(self) -> int:
        """Highest applied version, 0 for an empty database."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] or 0

    def apply(self, migration: Migration) -> None:
        """Apply one migration in its own transaction.

        Raises:
            ValueError: If the migration is not newer than the database
            RuntimeError: If the migration fails; nothing is recorded
        """
        current = self.get_current_version()
        if migration.version <= current:
            raise ValueError(
                f"Migration {migration.version} is not newer than schema version {current}"
            )

        try:
            migration.up(self.connection)
            self.connection.execute(
                "INSERT INTO schema_version (version, description, applied_at) VALUES (?, ?, ?)",
                (migration.version, migration.description, to_storage(utc_now())),
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise RuntimeError(f"Migration {migration.version} failed: {e}") from e

        get_logger().info("Applied migration %d: %s", migration.version, migration.description)

    def run_migrations(self, migrations: list[Migration]) -> int:
        """Apply every migration newer than the database, in version order.

        Returns:
            Number of migrations applied
        """
        current = self.get_current_version()
        pending = sorted(
            (m for m in migrations if m.version > current), key=lambda m: m.version
        )
        for migration in pending:
            self.apply(migration)
        return len(pending)

    def get_migration_history(self) -> list[dict]:
        """Applied migrations, oldest first."""
        cursor = self.connection.execute(
            "SELECT version, description, applied_at FROM schema_version ORDER BY version"
        )
        return [dict(row) for row in cursor.fetchall()]


def get_current_version(connection: sqlite3.Connection) -> int:
    """Schema version of ``connection``'s database."""
    return MigrationRunner(connection).get_current_version()
