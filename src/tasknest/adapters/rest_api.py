"""REST API adapter - RemoteTaskStore implemented over the TaskNest HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from tasknest.exceptions import TransportError
from tasknest.models import Project, Task, TaskCreate, TaskFilters, TaskUpdate
from tasknest.repositories import RemoteTaskStore
from tasknest.services.api.client import APIClient
from tasknest.services.api.projects import ProjectsAPI
from tasknest.services.api.tasks import TasksAPI


def _task(data: Any) -> Task:
    try:
        return Task.model_validate(data)
    except PydanticValidationError as e:
        raise TransportError(f"Malformed task in response: {e.errors()[0]['msg']}") from e


def _tasks(data: Any) -> list[Task]:
    if not isinstance(data, list):
        raise TransportError("Malformed response: expected a list of tasks")
    return [_task(item) for item in data]


def _projects(data: Any) -> list[Project]:
    if not isinstance(data, list):
        raise TransportError("Malformed response: expected a list of projects")
    try:
        return [Project.model_validate(item) for item in data]
    except PydanticValidationError as e:
        raise TransportError(f"Malformed project in response: {e.errors()[0]['msg']}") from e


class RestApiTaskStore(RemoteTaskStore):
    """Remote task store backed by the REST API.

    Errors surface as the TaskNestError subclasses raised by APIClient.
    """

    def __init__(self, client: APIClient | None = None):
        """Initialize the store.

        Args:
            client: Configured API client; built from the config file if None
        """
        self._client = client
        self._tasks_api: TasksAPI | None = None
        self._projects_api: ProjectsAPI | None = None

    @property
    def client(self) -> APIClient:
        if self._client is None:
            self._client = APIClient()
        return self._client

    @property
    def tasks_api(self) -> TasksAPI:
        """Get or create TasksAPI instance."""
        if self._tasks_api is None:
            self._tasks_api = TasksAPI(self.client)
        return self._tasks_api

    @property
    def projects_api(self) -> ProjectsAPI:
        """Get or create ProjectsAPI instance."""
        if self._projects_api is None:
            self._projects_api = ProjectsAPI(self.client)
        return self._projects_api

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    async def list_tasks(self, project_id: str, filters: TaskFilters) -> list[Task]:
        result = await self.tasks_api.list_tasks(
            project_id,
            parent_id=None if filters.top_level else filters.parent_id,
            due_date=None if filters.due_date == "all" else filters.due_date,
            priority=None if filters.priority == "all" else filters.priority,
        )
        return _tasks(result)

    async def get_task(self, task_id: str) -> Task:
        return _task(await self.tasks_api.get_task(task_id))

    async def get_subtasks(self, parent_id: str) -> list[Task]:
        result = await self.tasks_api.get_subtasks(parent_id)
        return _tasks(result)

    async def get_completion_percentage(self, parent_id: str) -> int:
        result = await self.tasks_api.get_completion(parent_id)
        try:
            return int(result["percentage"])
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError("Malformed completion response") from e

    async def create_task(self, task_data: TaskCreate) -> Task:
        data = task_data.model_dump(by_alias=True, exclude_none=True, mode="json")
        return _task(await self.tasks_api.create_task(data))

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task:
        # Explicit nulls are kept so that a field can be cleared.
        data = TaskUpdate(**changes).model_dump(by_alias=True, exclude_unset=True, mode="json")
        return _task(await self.tasks_api.update_task(task_id, data))

    async def delete_task(self, task_id: str) -> None:
        await self.tasks_api.delete_task(task_id)

    async def complete_task(self, task_id: str) -> Task:
        return _task(await self.tasks_api.complete_task(task_id))

    async def uncomplete_task(self, task_id: str) -> Task:
        return _task(await self.tasks_api.uncomplete_task(task_id))

    async def search_tasks(self, query: str) -> list[Task]:
        result = await self.tasks_api.search_tasks(query)
        return _tasks(result)

    async def list_projects(self) -> list[Project]:
        result = await self.projects_api.list_projects()
        return _projects(result)
