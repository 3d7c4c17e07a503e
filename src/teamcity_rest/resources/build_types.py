from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..errors import ModelValidationError
from ..locators import locator_id, locator_name, path_segment
from ..events import log_event
from ..models import (
    BuildType,
    BuildTypeReference,
    Properties,
    Property,
    Step,
    VcsRoot,
    VcsRootEntries,
    VcsRootEntry,
    VcsRootReference,
    parse_step,
    parse_steps,
)

if TYPE_CHECKING:
    from ..client import TeamCityClient

RESOURCE = "build_types"

VcsRootLike = Union[VcsRoot, VcsRootReference, str]


def _vcs_root_id(vcs_root: VcsRootLike) -> str:
    root_id = vcs_root if isinstance(vcs_root, str) else vcs_root.id
    if not root_id:
        raise ValueError("vcs root id is required to attach it to a build type.")
    return root_id


def _to_step(payload: Dict[str, Any]) -> Step:
    try:
        return parse_step(payload)
    except PydanticValidationError as exc:
        raise ModelValidationError(
            f"Response did not match step model: {exc}"
        ) from exc


def _to_steps(payload: Dict[str, Any]) -> List[Step]:
    try:
        return parse_steps(payload)
    except (PydanticValidationError, ValueError) as exc:
        raise ModelValidationError(
            f"Response did not match step model: {exc}"
        ) from exc


class BuildTypes:
    def __init__(self, client: "TeamCityClient"):
        self._client = client

    @staticmethod
    def _path(build_type_id: str) -> str:
        return f"/buildTypes/{locator_id(build_type_id)}"

    async def create(
        self, project_id: str, build_type: BuildType
    ) -> BuildTypeReference:
        """Create a build type under `project_id`, ignoring build_type.project_id."""
        if not project_id:
            raise ValueError("project_id must be provided.")
        created = await self._client.request_model(
            BuildTypeReference,
            "POST",
            "/buildTypes",
            json=build_type.to_create_payload(project_id),
            resource=RESOURCE,
        )
        log_event(
            "build_type.created",
            resource=RESOURCE,
            resource_id=created.id,
            parent_id=project_id,
        )
        return created

    async def get_by_id(self, build_type_id: str) -> BuildType:
        return await self._client.request_model(
            BuildType, "GET", self._path(build_type_id), resource=RESOURCE
        )

    async def get_by_name(self, project_id: str, name: str) -> BuildType:
        return await self._client.request_model(
            BuildType,
            "GET",
            f"/projects/{locator_id(project_id)}/buildTypes/{locator_name(name)}",
            resource=RESOURCE,
        )

    async def delete(self, build_type_id: str) -> None:
        await self._client.delete(self._path(build_type_id), resource=RESOURCE)
        log_event("build_type.deleted", resource=RESOURCE, resource_id=build_type_id)

    # --- VCS root entries ---

    async def attach_vcs_root(
        self,
        build_type_id: str,
        vcs_root: VcsRootLike,
        *,
        checkout_rules: Optional[str] = None,
    ) -> VcsRootEntry:
        root_id = _vcs_root_id(vcs_root)
        payload: Dict[str, Any] = {"id": root_id, "vcs-root": {"id": root_id}}
        if checkout_rules:
            payload["checkout-rules"] = checkout_rules
        entry = await self._client.request_model(
            VcsRootEntry,
            "POST",
            f"{self._path(build_type_id)}/vcs-root-entries",
            json=payload,
            resource=RESOURCE,
        )
        log_event(
            "build_type.vcs_root_attached",
            resource=RESOURCE,
            resource_id=root_id,
            parent_id=build_type_id,
        )
        return entry

    async def detach_vcs_root(self, build_type_id: str, vcs_root_id: str) -> None:
        await self._client.delete(
            f"{self._path(build_type_id)}/vcs-root-entries/"
            f"{path_segment(vcs_root_id)}",
            resource=RESOURCE,
        )
        log_event(
            "build_type.vcs_root_detached",
            resource=RESOURCE,
            resource_id=vcs_root_id,
            parent_id=build_type_id,
        )

    async def get_vcs_root_entries(self, build_type_id: str) -> VcsRootEntries:
        return await self._client.request_model(
            VcsRootEntries,
            "GET",
            f"{self._path(build_type_id)}/vcs-root-entries",
            resource=RESOURCE,
        )

    # --- Steps ---

    async def add_step(self, build_type_id: str, step: Step) -> Step:
        """Append a step; the returned copy carries the server-assigned id."""
        payload = step.to_payload()
        payload.pop("id", None)
        created = await self._client.post(
            f"{self._path(build_type_id)}/steps", json=payload, resource=RESOURCE
        )
        result = _to_step(created)
        log_event(
            "build_type.step_added",
            resource=RESOURCE,
            resource_id=result.id,
            parent_id=build_type_id,
        )
        return result

    async def get_steps(self, build_type_id: str) -> List[Step]:
        payload = await self._client.get(
            f"{self._path(build_type_id)}/steps", resource=RESOURCE
        )
        return _to_steps(payload)

    async def delete_step(self, build_type_id: str, step_id: str) -> None:
        if not step_id:
            raise ValueError("step_id must be provided.")
        await self._client.delete(
            f"{self._path(build_type_id)}/steps/{path_segment(step_id)}",
            resource=RESOURCE,
        )
        log_event(
            "build_type.step_deleted",
            resource=RESOURCE,
            resource_id=step_id,
            parent_id=build_type_id,
        )

    # --- Settings and parameters ---

    async def update_settings(self, build_type_id: str, settings: Properties) -> None:
        """Send each setting as its own text/plain PUT, in builder order."""
        base = f"{self._path(build_type_id)}/settings"
        for item in settings.items:
            await self._client.put_text(
                f"{base}/{path_segment(item.name)}", item.value, resource=RESOURCE
            )
        log_event(
            "build_type.settings_updated",
            resource=RESOURCE,
            resource_id=build_type_id,
        )

    async def set_parameter(
        self, build_type_id: str, name: str, value: str
    ) -> Property:
        if not name:
            raise ValueError("parameter name must be provided.")
        payload = await self._client.put(
            f"{self._path(build_type_id)}/parameters/{path_segment(name)}",
            json={"name": name, "value": value},
            resource=RESOURCE,
        )
        return self._client.parse_model(Property, payload)
