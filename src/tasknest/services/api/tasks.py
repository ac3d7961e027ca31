"""Tasks API endpoints."""

from typing import Any

from tasknest.services.api.client import APIClient, decode_json


class TasksAPI:
    """Tasks API client. Payloads and results use the camelCase wire format."""

    def __init__(self, client: APIClient):
        self.client = client

    async def list_tasks(
        self,
        project_id: str,
        *,
        parent_id: str | None = None,
        due_date: str | None = None,
        priority: str | None = None,
    ) -> list[dict]:
        """List a project's tasks."""
        response = await self.client.get(
            f"/tasks/project/{project_id}",
            params={"parentId": parent_id, "dueDate": due_date, "priority": priority},
        )
        return decode_json(response)

    async def get_task(self, task_id: str) -> dict:
        """Get a specific task by ID."""
        response = await self.client.get(f"/tasks/{task_id}")
        return decode_json(response)

    async def get_subtasks(self, parent_id: str) -> list[dict]:
        """List direct subtasks of a task."""
        response = await self.client.get(f"/tasks/subtasks/{parent_id}")
        return decode_json(response)

    async def get_completion(self, parent_id: str) -> dict:
        """Completion percentage of a task's subtasks."""
        response = await self.client.get(f"/tasks/completion/{parent_id}")
        return decode_json(response)

    async def search_tasks(self, query: str) -> list[dict]:
        """Search tasks by content or tag."""
        response = await self.client.get("/tasks/search", params={"query": query})
        return decode_json(response)

    async def create_task(self, data: dict[str, Any]) -> dict:
        """Create a new task."""
        response = await self.client.post("/tasks", json=data)
        return decode_json(response)

    async def update_task(self, task_id: str, updates: dict[str, Any]) -> dict:
        """Partially update a task."""
        response = await self.client.put(f"/tasks/{task_id}", json=updates)
        return decode_json(response)

    async def delete_task(self, task_id: str) -> None:
        """Delete a task."""
        await self.client.delete(f"/tasks/{task_id}")

    async def complete_task(self, task_id: str) -> dict:
        """Mark a task as completed."""
        response = await self.client.patch(f"/tasks/{task_id}/complete")
        return decode_json(response)

    async def uncomplete_task(self, task_id: str) -> dict:
        """Mark a task as not completed."""
        response = await self.client.patch(f"/tasks/{task_id}/uncomplete")
        return decode_json(response)
