"""SQLite implementation of ActivityRepository."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from datetime import datetime

from tasknest.adapters.sqlite.utils import generate_uuid, row_to_dict
from tasknest.models import ActivityEntry
from tasknest.repositories import ActivityRepository
from tasknest.utils.dates import to_storage, utc_now


class SqliteActivityRepository(ActivityRepository):
    """Append-only activity log stored in SQLite."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.connection = connection
        self.clock = clock

    async def add(
        self, user_id: str, action: str, entity_type: str, entity_id: str | None
    ) -> ActivityEntry:
        entry_id = generate_uuid()
        now = to_storage(self.clock())

        self.connection.execute(
            """INSERT INTO activity_logs (id, user_id, action, entity_type, entity_id, created_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (entry_id, user_id, action, entity_type, entity_id, now),
        )
        self.connection.commit()

        return ActivityEntry(
            id=entry_id,
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            created_at=now,
        )

    async def list_all(self, user_id: str, limit: int = 100) -> list[ActivityEntry]:
        cursor = self.connection.execute(
            """SELECT * FROM activity_logs WHERE user_id = ?
               ORDER BY created_at DESC LIMIT ?""",
            (user_id, limit),
        )
        return [ActivityEntry(**row_to_dict(row)) for row in cursor.fetchall()]
