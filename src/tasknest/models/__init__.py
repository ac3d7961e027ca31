"""TaskNest domain models.

Pydantic models for the core entities (tasks, projects, activity, users),
the priority enum, and the configuration models.
"""

from .config_models import APIConfig, AppConfig, OutputConfig, ServerConfig
from .core import (
    ActivityEntry,
    Project,
    ProjectCreate,
    Task,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
    User,
)
from .priority import PRIORITY_FILTERS, Priority

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskFilters",
    "Priority",
    "PRIORITY_FILTERS",
    # Project models
    "Project",
    "ProjectCreate",
    # Activity / users
    "ActivityEntry",
    "User",
    # Config models
    "AppConfig",
    "APIConfig",
    "ServerConfig",
    "OutputConfig",
]
