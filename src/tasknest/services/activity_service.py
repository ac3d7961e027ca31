"""Activity recording for task mutations.

The task store notifies every registered observer after a successful
mutation. Observers are side channels: whatever they raise is logged and
never changes the result of the mutation that triggered them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from tasknest.models import ActivityEntry
from tasknest.repositories import ActivityRepository


@dataclass(frozen=True)
class ActivityEvent:
    """A user action on an entity."""

    user_id: str
    action: str
    entity_id: str | None = None
    entity_type: str = "task"


class ActivityObserver(ABC):
    """Receives activity events emitted by the task store."""

    @abstractmethod
    async def record(self, event: ActivityEvent) -> None:
        """Handle one event."""


class RepositoryActivityObserver(ActivityObserver):
    """Persists events to the activity log."""

    def __init__(self, repository: ActivityRepository):
        self.repository = repository

    async def record(self, event: ActivityEvent) -> None:
        await self.repository.add(
            event.user_id, event.action, event.entity_type, event.entity_id
        )


class ActivityService:
    """Read side of the activity log."""

    def __init__(self, repository: ActivityRepository):
        self.repository = repository

    async def list_activity(self, user_id: str, limit: int = 100) -> list[ActivityEntry]:
        """List the caller's activity, newest first."""
        return await self.repository.list_all(user_id, limit)
