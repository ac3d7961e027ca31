"""Task store service - business rules for the task hierarchy.

This service sits between the HTTP layer and the repositories. Every
operation takes the caller's ``owner_id`` and never reads or writes tasks
owned by anyone else: a foreign task is reported exactly like a missing one.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from tasknest.exceptions import NotFoundError, ValidationError
from tasknest.models import PRIORITY_FILTERS, Priority, Task, TaskCreate, TaskFilters, TaskUpdate
from tasknest.repositories import ProjectRepository, TaskRepository
from tasknest.services.activity_service import ActivityEvent, ActivityObserver
from tasknest.utils.dates import DUE_FILTERS, due_window, utc_now
from tasknest.utils.logger import get_logger


def completion_percentage(total: int, completed: int) -> int:
    """Share of completed subtasks, rounded half up, 0 with no subtasks."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


class TaskStoreService:
    """Service for task business logic.

    Encapsulates validation, the completion state machine and activity
    emission, using the task and project repositories for storage.
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        project_repository: ProjectRepository,
        observers: Iterable[ActivityObserver] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the task store service.

        Args:
            task_repository: TaskRepository implementation for data access
            project_repository: Used to check project ownership on create
            observers: Receivers of activity events
            clock: Source of "now" for due-date windows
        """
        self.repository = task_repository
        self.projects = project_repository
        self.observers = list(observers or [])
        self.clock = clock

    async def create_task(self, owner_id: str, task_data: TaskCreate) -> Task:
        """Create a new task.

        Raises:
            ValidationError: If content or project_id is missing
            NotFoundError: If the project or parent task is not the caller's
        """
        content = (task_data.content or "").strip()
        if not content:
            raise ValidationError("Task content is required")
        if not task_data.project_id:
            raise ValidationError("Project ID is required")

        await self.projects.get(owner_id, task_data.project_id)
        if task_data.parent_id:
            await self._require_parent(owner_id, task_data.parent_id)

        task = await self.repository.add(
            owner_id,
            {
                "content": content,
                "description": task_data.description,
                "project_id": task_data.project_id,
                "parent_id": task_data.parent_id or None,
                "priority": Priority.parse(task_data.priority).stored,
                "due_date": task_data.due_date,
                "tags": task_data.tags,
                "order": task_data.order,
            },
        )
        get_logger().info("Task %s created by %s", task.id, owner_id)
        await self._emit(owner_id, f"created: {task.content}", task.id)
        return task

    async def list_tasks(
        self, owner_id: str, project_id: str, filters: TaskFilters | None = None
    ) -> list[Task]:
        """List a project's tasks.

        Top-level listings (no parent filter, or the literal ``"null"``)
        carry ``subtask_count``.

        Raises:
            ValidationError: If a due or priority filter value is unknown
        """
        filters = filters or TaskFilters()
        if filters.due_date not in DUE_FILTERS:
            raise ValidationError(f"Invalid due date filter: {filters.due_date}")
        if filters.priority not in PRIORITY_FILTERS:
            raise ValidationError(f"Invalid priority filter: {filters.priority}")

        window = due_window(filters.due_date, self.clock())
        return await self.repository.list_by_project(owner_id, project_id, filters, window)

    async def get_task(self, owner_id: str, task_id: str) -> Task:
        """Get a specific task by ID."""
        return await self.repository.get(owner_id, task_id)

    async def get_subtasks(self, owner_id: str, parent_id: str) -> list[Task]:
        """Direct subtasks of a task; empty for an unknown parent."""
        return await self.repository.list_subtasks(owner_id, parent_id)

    async def get_completion_percentage(self, owner_id: str, parent_id: str) -> int:
        """Percentage of a task's direct subtasks that are completed."""
        total, completed = await self.repository.count_subtasks(owner_id, parent_id)
        return completion_percentage(total, completed)

    async def update_task(self, owner_id: str, task_id: str, updates: TaskUpdate) -> Task:
        """Partially update a task.

        Only fields explicitly present in ``updates`` are written.

        Raises:
            ValidationError: If content is blank or the task would parent itself
            NotFoundError: If the task or the new parent is not the caller's
        """
        await self.repository.get(owner_id, task_id)
        values = await self._normalize_changes(owner_id, task_id, updates.changes())

        task = await self.repository.update(owner_id, task_id, values)
        get_logger().info("Task %s updated (%s)", task_id, ", ".join(sorted(values)))
        await self._emit(owner_id, "updated task", task_id)
        return task

    async def delete_task(self, owner_id: str, task_id: str) -> None:
        """Delete a task. Its subtasks are left in place."""
        await self.repository.delete(owner_id, task_id)
        get_logger().info("Task %s deleted by %s", task_id, owner_id)
        await self._emit(owner_id, "deleted task", task_id)

    async def complete(self, owner_id: str, task_id: str) -> Task:
        """Mark a task completed. Completing a completed task is a no-op."""
        return await self._set_completed(owner_id, task_id, True)

    async def uncomplete(self, owner_id: str, task_id: str) -> Task:
        """Mark a task not completed. A no-op if it is already incomplete."""
        return await self._set_completed(owner_id, task_id, False)

    async def search_tasks(self, owner_id: str, query: str | None) -> list[Task]:
        """Tasks whose content or any tag contains ``query``, newest first."""
        if not query or not query.strip():
            return []
        return await self.repository.search(owner_id, query)

    async def _set_completed(self, owner_id: str, task_id: str, completed: bool) -> Task:
        task = await self.repository.get(owner_id, task_id)
        if task.is_completed == completed:
            return task

        task = await self.repository.update(owner_id, task_id, {"is_completed": completed})
        await self._emit(owner_id, "completed task" if completed else "uncompleted task", task_id)
        return task

    async def _require_parent(self, owner_id: str, parent_id: str) -> Task:
        try:
            return await self.repository.get(owner_id, parent_id)
        except NotFoundError:
            raise NotFoundError("Parent task not found") from None

    async def _normalize_changes(
        self, owner_id: str, task_id: str, changes: dict[str, Any]
    ) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for key, value in changes.items():
            if key == "content":
                value = (value or "").strip()
                if not value:
                    raise ValidationError("Task content cannot be empty")
            elif key == "priority":
                value = Priority.parse(value).stored
            elif key == "parent_id":
                value = value or None
                if value == task_id:
                    raise ValidationError("A task cannot be its own parent")
                if value is not None:
                    await self._require_parent(owner_id, value)
            elif key == "tags":
                value = value or []
            elif key in ("is_completed", "order") and value is None:
                continue
            values[key] = value
        return values

    async def _emit(self, owner_id: str, action: str, task_id: str) -> None:
        event = ActivityEvent(user_id=owner_id, action=action, entity_id=task_id)
        for observer in self.observers:
            try:
                await observer.record(event)
            except Exception as e:
                get_logger().warning(
                    "Activity observer %s failed for %r: %s",
                    type(observer).__name__,
                    action,
                    e,
                )
