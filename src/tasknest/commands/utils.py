"""Shared helpers for task and project commands."""

from datetime import datetime

from tasknest.adapters.rest_api import RestApiTaskStore
from tasknest.exceptions import NotFoundError, ValidationError
from tasknest.models import Project
from tasknest.repositories import RemoteTaskStore
from tasknest.services.api.client import get_client
from tasknest.services.auth_service import AuthService
from tasknest.services.optimistic import find_inbox
from tasknest.utils.dates import ensure_utc


def get_task_store() -> RestApiTaskStore:
    """Remote store authenticated with the saved token."""
    return RestApiTaskStore(get_client(token=AuthService.require_token()))


async def resolve_project(store: RemoteTaskStore, project: str | None) -> Project:
    """Find a project by id or name (case-insensitive); the inbox if None."""
    projects = await store.list_projects()
    if project is None:
        inbox = find_inbox(projects)
        if inbox is None:
            raise NotFoundError("No inbox project found")
        return inbox

    for candidate in projects:
        if candidate.id == project:
            return candidate
    wanted = project.strip().lower()
    for candidate in projects:
        if candidate.name.lower() == wanted:
            return candidate
    raise NotFoundError(f"Project not found: {project}")


def parse_due(value: str | None) -> datetime | None:
    """Parse a --due option (ISO date or datetime)."""
    if value is None:
        return None
    due = ensure_utc(value)
    if not isinstance(due, datetime):
        raise ValidationError(f"Invalid date: {value} (expected YYYY-MM-DD)")
    return due
