"""SQLite implementation of TaskRepository."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from datetime import datetime
from typing import Any

from tasknest.adapters.sqlite.utils import (
    dump_tags,
    fold_case,
    generate_uuid,
    load_tags,
    row_to_dict,
)
from tasknest.exceptions import NotFoundError
from tasknest.models import Priority, Task, TaskFilters
from tasknest.repositories import TaskRepository
from tasknest.utils.dates import DueWindow, from_storage, to_storage, utc_now

# Attribute name -> column name where they differ ("order" is reserved in SQL).
_COLUMNS = {"order": "sort_order"}

_WRITABLE = (
    "content",
    "description",
    "parent_id",
    "priority",
    "due_date",
    "tags",
    "is_completed",
    "order",
)

_SORT = " ORDER BY t.sort_order ASC, t.created_at DESC"

_SUBTASK_COUNT = (
    ", (SELECT COUNT(*) FROM tasks s"
    " WHERE s.owner_id = t.owner_id AND s.parent_id = t.id) AS subtask_count"
)


def _to_column_value(key: str, value: Any) -> Any:
    if key == "due_date":
        return to_storage(value)
    if key == "tags":
        return dump_tags(value)
    if key == "is_completed":
        return 1 if value else 0
    return value


def _row_to_task(row: sqlite3.Row) -> Task:
    data = row_to_dict(row)
    return Task(
        id=data["id"],
        content=data["content"],
        description=data["description"],
        owner_id=data["owner_id"],
        project_id=data["project_id"],
        parent_id=data["parent_id"],
        priority=Priority.from_stored(data["priority"]).stored,
        due_date=from_storage(data["due_date"]),
        tags=load_tags(data["tags"]),
        is_completed=bool(data["is_completed"]),
        order=data["sort_order"],
        subtask_count=data.get("subtask_count"),
        created_at=from_storage(data["created_at"]),
        updated_at=from_storage(data["updated_at"]),
    )


class SqliteTaskRepository(TaskRepository):
    """SQLite implementation of task repository."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize SQLite task repository.

        Args:
            connection: Open connection with the schema applied
            clock: Source of timestamps for created_at/updated_at
        """
        self.connection = connection
        self.clock = clock

    async def list_by_project(
        self,
        owner_id: str,
        project_id: str,
        filters: TaskFilters,
        due: DueWindow | None = None,
    ) -> list[Task]:
        """List a project's tasks with parent, priority and due filters."""
        top_level = filters.top_level

        query = "SELECT t.*" + (_SUBTASK_COUNT if top_level else "")
        query += " FROM tasks t WHERE t.owner_id = ? AND t.project_id = ?"
        params: list[Any] = [owner_id, project_id]

        if top_level:
            query += " AND t.parent_id IS NULL"
        else:
            query += " AND t.parent_id = ?"
            params.append(filters.parent_id)

        if filters.priority == "none":
            query += " AND (t.priority IS NULL OR t.priority NOT BETWEEN 1 AND 4)"
        elif filters.priority != "all":
            query += " AND t.priority = ?"
            params.append(Priority.parse(filters.priority).stored)

        if due is not None:
            if due.start is not None:
                query += " AND t.due_date >= ?"
                params.append(to_storage(due.start))
            if due.end is not None:
                query += " AND t.due_date <= ?" if due.end_inclusive else " AND t.due_date < ?"
                params.append(to_storage(due.end))
            if due.incomplete_only:
                query += " AND t.is_completed = 0"

        query += _SORT

        cursor = self.connection.execute(query, params)
        return [_row_to_task(row) for row in cursor.fetchall()]

    async def list_subtasks(self, owner_id: str, parent_id: str) -> list[Task]:
        """List direct subtasks of a task."""
        cursor = self.connection.execute(
            "SELECT t.* FROM tasks t WHERE t.owner_id = ? AND t.parent_id = ?" + _SORT,
            (owner_id, parent_id),
        )
        return [_row_to_task(row) for row in cursor.fetchall()]

    async def count_subtasks(self, owner_id: str, parent_id: str) -> tuple[int, int]:
        """Count (total, completed) direct subtasks."""
        cursor = self.connection.execute(
            """SELECT COUNT(*), COALESCE(SUM(is_completed), 0)
               FROM tasks WHERE owner_id = ? AND parent_id = ?""",
            (owner_id, parent_id),
        )
        total, completed = cursor.fetchone()
        return int(total), int(completed)

    async def get(self, owner_id: str, task_id: str) -> Task:
        """Get a specific task by ID."""
        cursor = self.connection.execute(
            "SELECT * FROM tasks WHERE id = ? AND owner_id = ?",
            (task_id, owner_id),
        )
        row = cursor.fetchone()

        if not row:
            raise NotFoundError("Task not found")

        return _row_to_task(row)

    async def add(self, owner_id: str, values: dict[str, Any]) -> Task:
        """Create a new task."""
        task_id = generate_uuid()
        now = to_storage(self.clock())

        self.connection.execute(
            """INSERT INTO tasks (
                id, content, description, owner_id, project_id, parent_id,
                priority, due_date, tags, is_completed, sort_order,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                task_id,
                values["content"],
                values.get("description"),
                owner_id,
                values["project_id"],
                values.get("parent_id"),
                values.get("priority"),
                to_storage(values.get("due_date")),
                dump_tags(values.get("tags")),
                1 if values.get("is_completed") else 0,
                values.get("order") or 0,
                now,
                now,
            ),
        )
        self.connection.commit()

        return await self.get(owner_id, task_id)

    async def update(self, owner_id: str, task_id: str, values: dict[str, Any]) -> Task:
        """Update an existing task."""
        set_parts = []
        params: list[Any] = []
        for key, value in values.items():
            if key not in _WRITABLE:
                continue
            set_parts.append(f"{_COLUMNS.get(key, key)} = ?")
            params.append(_to_column_value(key, value))

        set_parts.append("updated_at = ?")
        params.append(to_storage(self.clock()))

        query = f"UPDATE tasks SET {', '.join(set_parts)} WHERE id = ? AND owner_id = ?"
        params.extend([task_id, owner_id])

        cursor = self.connection.execute(query, params)
        self.connection.commit()

        if cursor.rowcount == 0:
            raise NotFoundError("Task not found")

        return await self.get(owner_id, task_id)

    async def delete(self, owner_id: str, task_id: str) -> bool:
        """Delete a task; subtasks are not touched."""
        cursor = self.connection.execute(
            "DELETE FROM tasks WHERE id = ? AND owner_id = ?",
            (task_id, owner_id),
        )
        self.connection.commit()

        if cursor.rowcount == 0:
            raise NotFoundError("Task not found")

        return True

    async def search(self, owner_id: str, query: str) -> list[Task]:
        """Substring search over content and tags, ignoring case (Unicode)."""
        needle = fold_case(query)
        cursor = self.connection.execute(
            """SELECT t.* FROM tasks t
               WHERE t.owner_id = ?
                 AND (instr(casefold(t.content), ?) > 0
                      OR EXISTS (SELECT 1 FROM json_each(t.tags) j
                                 WHERE instr(casefold(j.value), ?) > 0))
               ORDER BY t.created_at DESC""",
            (owner_id, needle, needle),
        )
        return [_row_to_task(row) for row in cursor.fetchall()]
