"""Database migrations for the TaskNest store."""

from .m001_initial_schema import InitialSchemaMigration, initial_migration
from .runner import Migration, MigrationRunner, get_current_version

ALL_MIGRATIONS: list[Migration] = [initial_migration]

__all__ = [
    "ALL_MIGRATIONS",
    "InitialSchemaMigration",
    "Migration",
    "MigrationRunner",
    "get_current_version",
    "initial_migration",
]
