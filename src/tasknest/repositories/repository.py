"""Repository abstraction layer for TaskNest.

Abstract base classes (ports) for persistence and for the remote task store.
Every store-side method takes the caller's ``owner_id`` and must restrict
reads and writes to records owned by it; a record owned by someone else is
reported exactly like a missing one.

Implementations (adapters) are in:
- tasknest.adapters.sqlite (server-side storage)
- tasknest.adapters.rest_api (client-side access over HTTP)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from tasknest.models import (
    ActivityEntry,
    Project,
    ProjectCreate,
    Task,
    TaskCreate,
    TaskFilters,
)
from tasknest.utils.dates import DueWindow


class TaskRepository(ABC):
    """Abstract base class for task persistence operations."""

    @abstractmethod
    async def list_by_project(
        self,
        owner_id: str,
        project_id: str,
        filters: TaskFilters,
        due: DueWindow | None = None,
    ) -> list[Task]:
        """List a project's tasks, sorted by order ASC then created_at DESC.

        Args:
            owner_id: Caller identity
            project_id: Project to list
            filters: Parent and priority filters (already validated)
            due: Due-date window, None for no constraint

        Returns:
            Matching tasks; top-level queries carry ``subtask_count``
        """
        raise NotImplementedError(
            "TaskRepository.list_by_project() must be implemented by adapter"
        )

    @abstractmethod
    async def list_subtasks(self, owner_id: str, parent_id: str) -> list[Task]:
        """List direct subtasks of a task, same sort as list_by_project."""
        raise NotImplementedError(
            "TaskRepository.list_subtasks() must be implemented by adapter"
        )

    @abstractmethod
    async def count_subtasks(self, owner_id: str, parent_id: str) -> tuple[int, int]:
        """Count direct subtasks.

        Returns:
            Tuple of (total, completed)
        """
        raise NotImplementedError(
            "TaskRepository.count_subtasks() must be implemented by adapter"
        )

    @abstractmethod
    async def get(self, owner_id: str, task_id: str) -> Task:
        """Get a specific task by ID.

        Raises:
            NotFoundError: If the task does not exist or is not owned
        """
        raise NotImplementedError("TaskRepository.get() must be implemented by adapter")

    @abstractmethod
    async def add(self, owner_id: str, values: dict[str, Any]) -> Task:
        """Insert a task from normalized column values.

        Returns:
            Created Task with generated ID and timestamps
        """
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def update(self, owner_id: str, task_id: str, values: dict[str, Any]) -> Task:
        """Write normalized column values to an existing task.

        Raises:
            NotFoundError: If the task does not exist or is not owned
        """
        raise NotImplementedError(
            "TaskRepository.update() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, owner_id: str, task_id: str) -> bool:
        """Delete a task. Subtasks are left in place.

        Raises:
            NotFoundError: If the task does not exist or is not owned
        """
        raise NotImplementedError(
            "TaskRepository.delete() must be implemented by adapter"
        )

    @abstractmethod
    async def search(self, owner_id: str, query: str) -> list[Task]:
        """Case-insensitive substring search over content and tags."""
        raise NotImplementedError(
            "TaskRepository.search() must be implemented by adapter"
        )


class ProjectRepository(ABC):
    """Abstract base class for project persistence operations."""

    @abstractmethod
    async def list_all(self, owner_id: str) -> list[Project]:
        """List the caller's projects, inbox first."""
        raise NotImplementedError(
            "ProjectRepository.list_all() must be implemented by adapter"
        )

    @abstractmethod
    async def get(self, owner_id: str, project_id: str) -> Project:
        """Get a specific project by ID.

        Raises:
            NotFoundError: If the project does not exist or is not owned
        """
        raise NotImplementedError(
            "ProjectRepository.get() must be implemented by adapter"
        )

    @abstractmethod
    async def create(
        self, owner_id: str, project_data: ProjectCreate, *, is_inbox: bool = False
    ) -> Project:
        """Create a new project."""
        raise NotImplementedError(
            "ProjectRepository.create() must be implemented by adapter"
        )

    @abstractmethod
    async def get_inbox(self, owner_id: str) -> Project:
        """Get the caller's inbox project, creating it if missing."""
        raise NotImplementedError(
            "ProjectRepository.get_inbox() must be implemented by adapter"
        )


class ActivityRepository(ABC):
    """Abstract base class for the activity log."""

    @abstractmethod
    async def add(
        self, user_id: str, action: str, entity_type: str, entity_id: str | None
    ) -> ActivityEntry:
        """Append an activity entry."""
        raise NotImplementedError(
            "ActivityRepository.add() must be implemented by adapter"
        )

    @abstractmethod
    async def list_all(self, user_id: str, limit: int = 100) -> list[ActivityEntry]:
        """List the caller's activity, newest first."""
        raise NotImplementedError(
            "ActivityRepository.list_all() must be implemented by adapter"
        )


class RemoteTaskStore(ABC):
    """The request/response contract the sync client relies on.

    The caller identity is implicit (a bearer credential held by the
    implementation). Every method may raise a TaskNestError subclass.
    """

    @abstractmethod
    async def list_tasks(self, project_id: str, filters: TaskFilters) -> list[Task]:
        """List a project's tasks."""

    @abstractmethod
    async def get_task(self, task_id: str) -> Task:
        """Get one task."""

    @abstractmethod
    async def get_subtasks(self, parent_id: str) -> list[Task]:
        """List direct subtasks."""

    @abstractmethod
    async def get_completion_percentage(self, parent_id: str) -> int:
        """Derived completion percentage of a task's subtasks."""

    @abstractmethod
    async def create_task(self, task_data: TaskCreate) -> Task:
        """Create a task."""

    @abstractmethod
    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task:
        """Apply a partial update keyed by attribute name."""

    @abstractmethod
    async def delete_task(self, task_id: str) -> None:
        """Delete a task."""

    @abstractmethod
    async def complete_task(self, task_id: str) -> Task:
        """Mark a task completed."""

    @abstractmethod
    async def uncomplete_task(self, task_id: str) -> Task:
        """Mark a task not completed."""

    @abstractmethod
    async def search_tasks(self, query: str) -> list[Task]:
        """Search tasks by content or tag."""

    @abstractmethod
    async def list_projects(self) -> list[Project]:
        """List the caller's projects."""
