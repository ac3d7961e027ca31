"""Repository interfaces for TaskNest.

Abstract base classes (ABCs) that define the contracts for persistence and
for remote task access. These are the "Ports" in the Hexagonal Architecture.

Implementations (Adapters) are in:
- tasknest.adapters.sqlite (server-side storage)
- tasknest.adapters.rest_api (HTTP client)
"""

from .repository import (
    ActivityRepository,
    ProjectRepository,
    RemoteTaskStore,
    TaskRepository,
)

__all__ = [
    "TaskRepository",
    "ProjectRepository",
    "ActivityRepository",
    "RemoteTaskStore",
]
