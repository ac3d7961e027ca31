"""TaskNest - tasks, subtasks and projects with an optimistic sync client."""

__version__ = "0.1.0"
