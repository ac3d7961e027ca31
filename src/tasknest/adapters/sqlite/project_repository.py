"""SQLite implementation of ProjectRepository."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from datetime import datetime

from tasknest.adapters.sqlite.utils import generate_uuid, row_to_dict
from tasknest.exceptions import NotFoundError, ValidationError
from tasknest.models import Project, ProjectCreate
from tasknest.repositories import ProjectRepository
from tasknest.utils.dates import to_storage, utc_now

INBOX_NAME = "Inbox"
INBOX_COLOR = "#4a90d9"


def _row_to_project(row: sqlite3.Row) -> Project:
    data = row_to_dict(row)
    data["is_favorite"] = bool(data["is_favorite"])
    data["is_inbox"] = bool(data["is_inbox"])
    return Project(**data)


class SqliteProjectRepository(ProjectRepository):
    """SQLite implementation of project repository."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.connection = connection
        self.clock = clock

    async def list_all(self, owner_id: str) -> list[Project]:
        """List the caller's projects, inbox first, then favorites, then by name."""
        cursor = self.connection.execute(
            """SELECT * FROM projects WHERE owner_id = ?
               ORDER BY is_inbox DESC, is_favorite DESC, name""",
            (owner_id,),
        )
        return [_row_to_project(row) for row in cursor.fetchall()]

    async def get(self, owner_id: str, project_id: str) -> Project:
        """Get a specific project by ID."""
        cursor = self.connection.execute(
            "SELECT * FROM projects WHERE id = ? AND owner_id = ?",
            (project_id, owner_id),
        )
        row = cursor.fetchone()

        if not row:
            raise NotFoundError("Project not found")

        return _row_to_project(row)

    async def create(
        self, owner_id: str, project_data: ProjectCreate, *, is_inbox: bool = False
    ) -> Project:
        """Create a new project."""
        name = project_data.name.strip()
        if not name:
            raise ValidationError("Project name is required")

        project_id = generate_uuid()
        now = to_storage(self.clock())

        self.connection.execute(
            """INSERT INTO projects (
                id, name, color, is_favorite, is_inbox, owner_id,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                project_id,
                name,
                project_data.color,
                1 if project_data.is_favorite else 0,
                1 if is_inbox else 0,
                owner_id,
                now,
                now,
            ),
        )
        self.connection.commit()

        return await self.get(owner_id, project_id)

    async def get_inbox(self, owner_id: str) -> Project:
        """Get the caller's inbox project, creating it if missing."""
        cursor = self.connection.execute(
            "SELECT * FROM projects WHERE owner_id = ? AND is_inbox = 1 LIMIT 1",
            (owner_id,),
        )
        row = cursor.fetchone()
        if row:
            return _row_to_project(row)

        return await self.create(
            owner_id, ProjectCreate(name=INBOX_NAME, color=INBOX_COLOR), is_inbox=True
        )
