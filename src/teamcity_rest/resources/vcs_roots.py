from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

from ..locators import locator_id
from ..events import log_event
from ..models import Properties, ProjectReference, VcsRoot, VcsRootReference

if TYPE_CHECKING:
    from ..client import TeamCityClient

RESOURCE = "vcs_roots"

GIT_VCS_NAME = "jetbrains.git"

AUTH_ANONYMOUS = "ANONYMOUS"
AUTH_PASSWORD = "PASSWORD"
AUTH_PRIVATE_KEY_DEFAULT = "PRIVATE_KEY_DEFAULT"
AUTH_METHODS = frozenset({AUTH_ANONYMOUS, AUTH_PASSWORD, AUTH_PRIVATE_KEY_DEFAULT})


def new_git_vcs_root(
    project_id: str,
    name: str,
    fetch_url: str,
    default_branch: str,
    *,
    branch_spec: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    auth_method: Optional[str] = None,
) -> VcsRoot:
    """
    Build an unsaved Git VCS root.

    The auth method defaults to PASSWORD when credentials are given and
    ANONYMOUS otherwise. `default_branch` is a full ref ("refs/heads/main").
    """
    if not project_id:
        raise ValueError("project_id must be provided.")
    if not name:
        raise ValueError("name must be provided.")
    if not fetch_url:
        raise ValueError("fetch_url must be provided.")
    if not default_branch:
        raise ValueError("default_branch must be provided.")

    default_method = AUTH_PASSWORD if (username or password) else AUTH_ANONYMOUS
    method = (auth_method or default_method).upper()
    if method not in AUTH_METHODS:
        raise ValueError(f"auth method must be one of {sorted(AUTH_METHODS)}")

    props: Dict[str, str] = {
        "url": fetch_url,
        "branch": default_branch,
        "authMethod": method,
        "agentCleanPolicy": "ON_BRANCH_CHANGE",
        "agentCleanFilesPolicy": "ALL_UNTRACKED",
        "submoduleCheckout": "CHECKOUT",
        "usernameStyle": "USERID",
        "ignoreKnownHosts": "true",
    }
    if branch_spec:
        props["teamcity:branchSpec"] = branch_spec
    if username:
        props["username"] = username
    if password:
        props["secure:password"] = password

    return VcsRoot(
        name=name,
        vcs_name=GIT_VCS_NAME,
        project=ProjectReference(id=project_id),
        properties=Properties.from_dict(props),
    )


class VcsRoots:
    def __init__(self, client: "TeamCityClient"):
        self._client = client

    async def create(self, project_id: str, vcs_root: VcsRoot) -> VcsRootReference:
        if not project_id:
            raise ValueError("project_id must be provided.")
        created = await self._client.request_model(
            VcsRootReference,
            "POST",
            "/vcs-roots",
            json=vcs_root.to_create_payload(project_id),
            resource=RESOURCE,
        )
        log_event(
            "vcs_root.created",
            resource=RESOURCE,
            resource_id=created.id,
            parent_id=project_id,
        )
        return created

    async def get_by_id(self, vcs_root_id: str) -> VcsRoot:
        return await self._client.request_model(
            VcsRoot, "GET", f"/vcs-roots/{locator_id(vcs_root_id)}", resource=RESOURCE
        )

    async def delete(self, vcs_root_id: str) -> None:
        await self._client.delete(
            f"/vcs-roots/{locator_id(vcs_root_id)}", resource=RESOURCE
        )
        log_event("vcs_root.deleted", resource=RESOURCE, resource_id=vcs_root_id)
