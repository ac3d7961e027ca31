"""Optimistic task list client.

Mutations are applied to the local task list first, sent to the remote
store, then reconciled with the authoritative response or rolled back.
At most one mutation per task id is in flight at a time.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from tasknest.exceptions import (
    NotFoundError,
    PendingMutationError,
    TaskNestError,
    TransportError,
    ValidationError,
)
from tasknest.models import Priority, Project, Task, TaskCreate, TaskFilters
from tasknest.repositories import RemoteTaskStore
from tasknest.utils.dates import ensure_utc, utc_now
from tasknest.utils.logger import get_logger

TEMP_ID_PREFIX = "tmp-"

# Fields a client may change. Identity, ownership, timestamps and derived
# counts are never part of a diff.
MUTABLE_FIELDS = (
    "content",
    "description",
    "parent_id",
    "priority",
    "due_date",
    "tags",
    "is_completed",
    "order",
)

SORT_ORDERS = ("default", "priority", "date_asc", "date_desc")


@dataclass
class MutationResult:
    """Outcome of an optimistic mutation."""

    ok: bool
    task: Task | None = None
    error: TaskNestError | None = None


class TaskList:
    """Ordered task list keyed by id, owned by a single client."""

    def __init__(self, tasks: Iterable[Task] | None = None):
        self._tasks: list[Task] = list(tasks or [])

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return self.index(task_id) is not None

    @property
    def ids(self) -> list[str]:
        return [task.id for task in self._tasks]

    def index(self, task_id: object) -> int | None:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        return None

    def get(self, task_id: str) -> Task | None:
        i = self.index(task_id)
        return None if i is None else self._tasks[i]

    def prepend(self, task: Task) -> None:
        self._tasks.insert(0, task)

    def replace(self, task_id: str, task: Task) -> bool:
        """Swap the entry with ``task_id`` for ``task``, keeping its position."""
        i = self.index(task_id)
        if i is None:
            return False
        self._tasks[i] = task
        return True

    def remove(self, task_id: str) -> Task | None:
        i = self.index(task_id)
        if i is None:
            return None
        return self._tasks.pop(i)

    def reset(self, tasks: Iterable[Task]) -> None:
        self._tasks = list(tasks)

    def snapshot(self) -> list[Task]:
        """Deep copy of the current contents."""
        return [task.model_copy(deep=True) for task in self._tasks]

    def restore(self, snapshot: list[Task]) -> None:
        self._tasks = [task.model_copy(deep=True) for task in snapshot]


def _comparable(field: str, value: Any) -> Any:
    if field == "priority":
        return Priority.parse(value).stored
    if field == "due_date":
        return ensure_utc(value)
    if field == "tags":
        return list(value or [])
    return value


def diff_task(current: Task, draft: Task) -> dict[str, Any]:
    """Mutable fields whose value differs between ``current`` and ``draft``.

    Returns:
        Dict keyed by attribute name, holding the draft's values
    """
    changes: dict[str, Any] = {}
    for field in MUTABLE_FIELDS:
        new = _comparable(field, getattr(draft, field))
        if new != _comparable(field, getattr(current, field)):
            changes[field] = new
    return changes


def _due_key(task: Task) -> datetime:
    return ensure_utc(task.due_date)


def sorted_tasks(tasks: Iterable[Task], sort_order: str = "default") -> list[Task]:
    """Order tasks for display.

    Args:
        tasks: Tasks in list order
        sort_order: ``default`` keeps list order; ``priority`` puts urgent
            first and no priority last; ``date_asc``/``date_desc`` order by
            due date with undated tasks last

    Raises:
        ValidationError: If sort_order is unknown
    """
    tasks = list(tasks)
    if sort_order == "default":
        return tasks
    if sort_order == "priority":
        return sorted(tasks, key=lambda t: -Priority.parse(t.priority))

    dated = [t for t in tasks if t.due_date is not None]
    undated = [t for t in tasks if t.due_date is None]
    if sort_order == "date_asc":
        return sorted(dated, key=_due_key) + undated
    if sort_order == "date_desc":
        return sorted(dated, key=_due_key, reverse=True) + undated
    raise ValidationError(f"Invalid sort order: {sort_order}")


def find_inbox(projects: Iterable[Project]) -> Project | None:
    """The inbox project among ``projects``, if any."""
    return next((p for p in projects if p.is_inbox), None)


def _log_error(message: str, error: Exception) -> None:
    get_logger().error("%s: %s", message, error)


def _log_success(message: str) -> None:
    get_logger().info(message)


class OptimisticTaskClient:
    """Client-side task list with optimistic mutations.

    Every mutation returns a MutationResult; failures are also reported to
    ``on_error`` and successes to ``on_success``. Any exception from
    the store rolls the list back; errors that are not TaskNestError are
    reported as TransportError. Failed mutations are not
    retried.
    """

    def __init__(
        self,
        store: RemoteTaskStore,
        tasks: Iterable[Task] | None = None,
        *,
        on_error: Callable[[str, Exception], None] | None = None,
        on_success: Callable[[str], None] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the client.

        Args:
            store: Remote task store
            tasks: Initial list contents
            on_error: Failure notifier, defaults to logging at ERROR
            on_success: Success notifier, defaults to logging at INFO
            clock: Timestamp source for provisional tasks
        """
        self.store = store
        self.tasks = TaskList(tasks)
        self.on_error = on_error or _log_error
        self.on_success = on_success or _log_success
        self.clock = clock
        self._pending: set[str] = set()
        self._detached = False

    @property
    def detached(self) -> bool:
        return self._detached

    def detach(self) -> None:
        """Stop applying responses to the list.

        Mutations still in flight complete against the store, but their
        results (success or rollback) no longer touch local state.
        """
        self._detached = True

    def is_pending(self, task_id: str) -> bool:
        return task_id in self._pending

    async def load(self, project_id: str, filters: TaskFilters | None = None) -> list[Task]:
        """Replace the list with a project's tasks."""
        tasks = await self.store.list_tasks(project_id, filters or TaskFilters())
        if not self._detached:
            self.tasks.reset(tasks)
        return tasks

    async def search(self, query: str) -> list[Task]:
        """Replace the list with search results."""
        tasks = await self.store.search_tasks(query)
        if not self._detached:
            self.tasks.reset(tasks)
        return tasks

    def sorted_tasks(self, sort_order: str = "default") -> list[Task]:
        """Current list in display order."""
        return sorted_tasks(self.tasks, sort_order)

    async def create(self, draft: TaskCreate) -> MutationResult:
        """Create a task, showing it at the top of the list immediately."""
        temp_id = f"{TEMP_ID_PREFIX}{uuid.uuid4()}"
        now = self.clock()
        provisional = Task(
            id=temp_id,
            content=draft.content,
            description=draft.description,
            project_id=draft.project_id or "",
            parent_id=draft.parent_id,
            priority=Priority.parse(draft.priority).stored,
            due_date=draft.due_date,
            tags=list(draft.tags),
            is_completed=False,
            order=draft.order,
            subtask_count=0,
            created_at=now,
            updated_at=now,
        )

        self._begin(temp_id)
        self.tasks.prepend(provisional)
        try:
            created = await self.store.create_task(draft)
        except Exception as e:  # noqa: BLE001
            if not self._detached:
                self.tasks.remove(temp_id)
            return self._failed("Failed to create task", e)
        finally:
            self._end(temp_id)

        if not self._detached:
            self.tasks.replace(temp_id, created)
        return self._succeeded("Task created", created)

    async def toggle_complete(self, task: Task | str) -> MutationResult:
        """Flip a task's completion state."""
        task_id = task if isinstance(task, str) else task.id
        self._begin(task_id)
        try:
            current = self.tasks.get(task_id)
            if current is None:
                if isinstance(task, str):
                    return self._failed("Failed to update task", NotFoundError("Task not in list"))
                current = task
            previous = current.is_completed
            self._set_flag(task_id, not previous)

            try:
                if previous:
                    updated = await self.store.uncomplete_task(task_id)
                else:
                    updated = await self.store.complete_task(task_id)
            except Exception as e:  # noqa: BLE001
                self._set_flag(task_id, previous)
                return self._failed("Failed to update task", e)
        finally:
            self._end(task_id)

        if not self._detached:
            self.tasks.replace(task_id, updated)
        return self._succeeded(
            "Task uncompleted" if previous else "Task completed", updated
        )

    async def update(self, draft: Task) -> MutationResult:
        """Send only the fields of ``draft`` that differ from the list entry."""
        self._begin(draft.id)
        try:
            current = self.tasks.get(draft.id)
            if current is None:
                return self._failed("Failed to update task", NotFoundError("Task not in list"))

            changes = diff_task(current, draft)
            if not changes:
                return MutationResult(ok=True, task=current)

            snapshot = self.tasks.snapshot()
            self.tasks.replace(draft.id, current.model_copy(update=changes))
            try:
                updated = await self.store.update_task(draft.id, changes)
            except Exception as e:  # noqa: BLE001
                if not self._detached:
                    self.tasks.restore(snapshot)
                return self._failed("Failed to update task", e)
        finally:
            self._end(draft.id)

        if not self._detached:
            self.tasks.replace(draft.id, updated)
        return self._succeeded("Task updated", updated)

    async def delete(self, task_id: str) -> MutationResult:
        """Remove a task from the list and the store."""
        self._begin(task_id)
        try:
            snapshot = self.tasks.snapshot()
            removed = self.tasks.remove(task_id)
            try:
                await self.store.delete_task(task_id)
            except Exception as e:  # noqa: BLE001
                if not self._detached:
                    self.tasks.restore(snapshot)
                return self._failed("Failed to delete task", e)
        finally:
            self._end(task_id)

        return self._succeeded("Task deleted", removed)

    def _begin(self, task_id: str) -> None:
        if task_id in self._pending:
            raise PendingMutationError(f"A change to task {task_id} is already in progress")
        self._pending.add(task_id)

    def _end(self, task_id: str) -> None:
        self._pending.discard(task_id)

    def _set_flag(self, task_id: str, completed: bool) -> None:
        if self._detached:
            return
        current = self.tasks.get(task_id)
        if current is not None:
            self.tasks.replace(task_id, current.model_copy(update={"is_completed": completed}))

    def _failed(self, message: str, error: Exception) -> MutationResult:
        if not isinstance(error, TaskNestError):
            get_logger().exception("%s: unexpected %s", message, type(error).__name__)
            wrapped = TransportError(f"{message}: {error}")
            wrapped.__cause__ = error
            error = wrapped
        self.on_error(message, error)
        return MutationResult(ok=False, error=error)

    def _succeeded(self, message: str, task: Task | None) -> MutationResult:
        self.on_success(message)
        return MutationResult(ok=True, task=task)
