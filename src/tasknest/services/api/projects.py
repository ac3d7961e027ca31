"""Projects and activity API endpoints."""

from tasknest.services.api.client import APIClient, decode_json


class ProjectsAPI:
    """Projects API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def list_projects(self) -> list[dict]:
        """List the caller's projects, inbox first."""
        response = await self.client.get("/projects")
        return decode_json(response)

    async def create_project(
        self, name: str, *, color: str | None = None, is_favorite: bool = False
    ) -> dict:
        """Create a new project."""
        data: dict = {"name": name, "isFavorite": is_favorite}
        if color:
            data["color"] = color
        response = await self.client.post("/projects", json=data)
        return decode_json(response)

    async def list_activity(self) -> list[dict]:
        """The caller's activity log, newest first."""
        response = await self.client.get("/activity-logs")
        return decode_json(response)
