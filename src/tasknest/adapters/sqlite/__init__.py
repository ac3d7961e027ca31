"""SQLite adapters for the TaskNest store."""

from tasknest.adapters.sqlite.activity_repository import SqliteActivityRepository
from tasknest.adapters.sqlite.connection import create_connection, get_connection
from tasknest.adapters.sqlite.project_repository import SqliteProjectRepository
from tasknest.adapters.sqlite.task_repository import SqliteTaskRepository

__all__ = [
    "SqliteActivityRepository",
    "SqliteProjectRepository",
    "SqliteTaskRepository",
    "create_connection",
    "get_connection",
]
