"""Tasks API endpoints."""

from typing import Any

from homelist.services.api.client import APIClient


class TasksAPI:
    """Tasks API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def get_infinite_tasks(self, limit: int, cursor: str | None = None) -> dict:
        """Fetch one page of tasks: ``{"items": [...], "nextCursor": ...}``."""
        params: dict[str, Any] = {"limit": limit}
        if cursor:
            params["cursor"] = cursor

        response = await self.client.get("/v1/tasks", params=params)
        return response.json()

    async def get_task(self, task_id: str) -> dict:
        """Get a specific task by ID."""
        response = await self.client.get(f"/v1/tasks/{task_id}")
        return response.json()

    async def create_task(
        self,
        title: str,
        *,
        description: str | None = None,
        task_type: str | None = None,
        author_id: str | None = None,
    ) -> dict:
        """Create a new task."""
        data: dict[str, Any] = {"title": title}

        if description:
            data["description"] = description
        if task_type:
            data["type"] = task_type
        if author_id:
            data["author_id"] = author_id

        response = await self.client.post("/v1/tasks", json=data)
        return response.json()

    async def update_task_status(self, task_id: str, completed: bool) -> dict:
        response = await self.client.patch(
            f"/v1/tasks/{task_id}/status", json={"completed": completed}
        )
        return response.json()

    async def update_task_position(self, task_id: str, position: float) -> dict:
        response = await self.client.patch(
            f"/v1/tasks/{task_id}/position", json={"position": position}
        )
        return response.json()

    async def update_task(self, task_id: str, **updates: Any) -> dict:
        """Update title and/or description."""
        response = await self.client.patch(f"/v1/tasks/{task_id}", json=updates)
        return response.json()

    async def delete_task(self, task_id: str) -> dict:
        """Delete a task, returning the deleted record."""
        response = await self.client.delete(f"/v1/tasks/{task_id}")
        return response.json()

    async def edit_task_public(
        self,
        task_id: str,
        secret: str,
        *,
        title: str | None = None,
        description: str | None = None,
    ) -> str:
        """Edit a task through the shared-secret endpoint used by integrations."""
        response = await self.client.request(
            "PUT",
            f"/api/tasks/edit/{task_id}",
            json={"title": title, "description": description},
            headers={"Authorization": secret},
        )
        return response.json()
