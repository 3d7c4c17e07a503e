from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..locators import collection_items, locator_id, locator_name, path_segment
from ..events import log_event
from ..models import Project, ProjectReference, Property

if TYPE_CHECKING:
    from ..client import TeamCityClient

RESOURCE = "projects"


class Projects:
    def __init__(self, client: "TeamCityClient"):
        self._client = client

    async def create(self, project: Project) -> Project:
        """Create a project; without a parent it is created under `_Root`."""
        created = await self._client.request_model(
            Project,
            "POST",
            "/projects",
            json=project.to_create_payload(),
            resource=RESOURCE,
        )
        log_event(
            "project.created",
            resource=RESOURCE,
            resource_id=created.id,
            parent_id=project.parent_id,
        )
        return created

    async def get_by_id(self, project_id: str) -> Project:
        return await self._client.request_model(
            Project, "GET", f"/projects/{locator_id(project_id)}", resource=RESOURCE
        )

    async def get_by_name(self, name: str) -> Project:
        return await self._client.request_model(
            Project, "GET", f"/projects/{locator_name(name)}", resource=RESOURCE
        )

    async def list(self) -> List[ProjectReference]:
        payload = await self._client.get("/projects", resource=RESOURCE)
        return [
            self._client.parse_model(ProjectReference, item)
            for item in collection_items(payload, "project")
        ]

    async def update(self, project: Project) -> Project:
        """
        Push name, description and archived flag of an existing project,
        then return the server's view of it.
        """
        if not project.id:
            raise ValueError("project id is required to update a project.")
        base = f"/projects/{locator_id(project.id)}"
        fields = {
            "name": project.name,
            "description": project.description or "",
            "archived": "true" if project.archived else "false",
        }
        for field, value in fields.items():
            await self._client.put_text(f"{base}/{field}", value, resource=RESOURCE)
        log_event("project.updated", resource=RESOURCE, resource_id=project.id)
        return await self.get_by_id(project.id)

    async def set_parameter(self, project_id: str, name: str, value: str) -> Property:
        if not name:
            raise ValueError("parameter name must be provided.")
        payload = await self._client.put(
            f"/projects/{locator_id(project_id)}/parameters/{path_segment(name)}",
            json={"name": name, "value": value},
            resource=RESOURCE,
        )
        return self._client.parse_model(Property, payload)

    async def delete(self, project_id: str) -> None:
        await self._client.delete(
            f"/projects/{locator_id(project_id)}", resource=RESOURCE
        )
        log_event("project.deleted", resource=RESOURCE, resource_id=project_id)
