from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .locators import collection_items

ROOT_PROJECT_ID = "_Root"

STEP_TYPE_COMMAND_LINE = "simpleRunner"
STEP_TYPE_POWERSHELL = "jetbrains_powershell"


class BaseTeamCityModel(BaseModel):
    """
    Base model for TeamCity JSON resources.
    TeamCity mixes camelCase ("webUrl") and hyphenated ("vcs-root-entries")
    keys, so fields carry aliases and accept their Python names as well.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# --- Properties ---


class Property(BaseTeamCityModel):
    name: str
    value: str = ""
    type: Optional[Dict[str, Any]] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "value": self.value}
        if self.type:
            payload["type"] = self.type
        return payload


class Properties(BaseTeamCityModel):
    """Ordered name/value list, the shape TeamCity uses for settings,
    parameters and step/VCS root properties."""

    count: int = 0
    items: List[Property] = Field(default_factory=list, alias="property")

    @model_validator(mode="after")
    def _sync_count(self) -> "Properties":
        self.count = len(self.items)
        return self

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "Properties":
        items = [Property(name=k, value=_stringify(v)) for k, v in values.items()]
        return cls(items=items)

    def get(self, name: str) -> Optional[str]:
        for item in self.items:
            if item.name == name:
                return item.value
        return None

    def to_dict(self) -> Dict[str, str]:
        return {item.name: item.value for item in self.items}

    def map(self) -> Dict[str, str]:
        return self.to_dict()

    def __len__(self) -> int:
        return len(self.items)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "count": len(self.items),
            "property": [item.to_payload() for item in self.items],
        }


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# --- References ---


class ProjectReference(BaseTeamCityModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    href: Optional[str] = None
    web_url: Optional[str] = Field(default=None, alias="webUrl")


class BuildTypeReference(BaseTeamCityModel):
    id: str
    name: str
    project_id: Optional[str] = Field(default=None, alias="projectId")
    project_name: Optional[str] = Field(default=None, alias="projectName")
    href: Optional[str] = None
    web_url: Optional[str] = Field(default=None, alias="webUrl")


class VcsRootReference(BaseTeamCityModel):
    id: str
    name: Optional[str] = None
    href: Optional[str] = None


# --- Projects ---


class Project(BaseTeamCityModel):
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    archived: bool = False
    href: Optional[str] = None
    web_url: Optional[str] = Field(default=None, alias="webUrl")
    parent_project_id: Optional[str] = Field(default=None, alias="parentProjectId")
    parent_project: Optional[ProjectReference] = Field(
        default=None, alias="parentProject"
    )
    parameters: Properties = Field(default_factory=Properties)

    @property
    def parent_id(self) -> str:
        if self.parent_project_id:
            return self.parent_project_id
        if self.parent_project and self.parent_project.id:
            return self.parent_project.id
        return ROOT_PROJECT_ID

    def to_create_payload(self) -> Dict[str, Any]:
        if not self.name:
            raise ValueError("project name must be provided.")
        payload: Dict[str, Any] = {
            "name": self.name,
            "parentProject": {"locator": f"id:{self.parent_id}"},
        }
        if self.id:
            payload["id"] = self.id
        if self.description:
            payload["description"] = self.description
        if self.parameters.items:
            payload["parameters"] = self.parameters.to_payload()
        return payload


# --- Steps ---


class Step(BaseTeamCityModel):
    """A build step. Subclasses add typed accessors over `properties`."""

    id: Optional[str] = None
    name: str = ""
    type: str
    disabled: bool = False
    properties: Properties = Field(default_factory=Properties)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "properties": self.properties.to_payload(),
        }
        if self.id:
            payload["id"] = self.id
        if self.disabled:
            payload["disabled"] = True
        return payload


class CommandLineStep(Step):
    type: str = STEP_TYPE_COMMAND_LINE

    @property
    def is_script(self) -> bool:
        return self.properties.get("use.custom.script") == "true"

    @property
    def executable(self) -> Optional[str]:
        return self.properties.get("command.executable")

    @property
    def args(self) -> Optional[str]:
        return self.properties.get("command.parameters")

    @property
    def script(self) -> Optional[str]:
        return self.properties.get("script.content")


class PowershellStep(Step):
    type: str = STEP_TYPE_POWERSHELL

    @property
    def script_mode(self) -> Optional[str]:
        return self.properties.get("jetbrains_powershell_script_mode")

    @property
    def script_file(self) -> Optional[str]:
        return self.properties.get("jetbrains_powershell_script_file")

    @property
    def code(self) -> Optional[str]:
        return self.properties.get("jetbrains_powershell_script_code")

    @property
    def args(self) -> Optional[str]:
        return self.properties.get("jetbrains_powershell_scriptArguments")


STEP_TYPES: Dict[str, Type[Step]] = {
    STEP_TYPE_COMMAND_LINE: CommandLineStep,
    STEP_TYPE_POWERSHELL: PowershellStep,
}


def parse_step(payload: Dict[str, Any]) -> Step:
    model = STEP_TYPES.get(payload.get("type") or "", Step)
    return model.model_validate(payload)


def parse_steps(payload: Any) -> List[Step]:
    """Accepts a `{"count": n, "step": [...]}` collection or a plain list."""
    if isinstance(payload, list):
        raw: Iterable[Any] = payload
    elif isinstance(payload, dict):
        raw = collection_items(payload, "step")
    else:
        return []
    return [item if isinstance(item, Step) else parse_step(item) for item in raw]


# --- VCS roots ---


class VcsRootEntry(BaseTeamCityModel):
    id: Optional[str] = None
    vcs_root: VcsRootReference = Field(alias="vcs-root")
    checkout_rules: Optional[str] = Field(default=None, alias="checkout-rules")


class VcsRootEntries(BaseTeamCityModel):
    count: int = 0
    items: List[VcsRootEntry] = Field(default_factory=list, alias="vcs-root-entry")

    @model_validator(mode="after")
    def _sync_count(self) -> "VcsRootEntries":
        self.count = len(self.items)
        return self

    def ids(self) -> Dict[str, Optional[str]]:
        """Maps attached VCS root id to its entry id."""
        return {entry.vcs_root.id: entry.id for entry in self.items}

    def __len__(self) -> int:
        return len(self.items)


class VcsRoot(BaseTeamCityModel):
    id: Optional[str] = None
    name: str
    vcs_name: str = Field(default="jetbrains.git", alias="vcsName")
    modification_check_interval: Optional[int] = Field(
        default=None, alias="modificationCheckInterval"
    )
    project: Optional[ProjectReference] = None
    properties: Properties = Field(default_factory=Properties)
    href: Optional[str] = None

    @property
    def project_id(self) -> Optional[str]:
        return self.project.id if self.project else None

    def to_create_payload(self, project_id: str) -> Dict[str, Any]:
        if not self.name:
            raise ValueError("vcs root name must be provided.")
        payload: Dict[str, Any] = {
            "name": self.name,
            "vcsName": self.vcs_name,
            "project": {"id": project_id},
            "properties": self.properties.to_payload(),
        }
        if self.id:
            payload["id"] = self.id
        if self.modification_check_interval is not None:
            payload["modificationCheckInterval"] = self.modification_check_interval
        return payload


# --- Build types ---


class BuildType(BaseTeamCityModel):
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    project_id: Optional[str] = Field(default=None, alias="projectId")
    project_name: Optional[str] = Field(default=None, alias="projectName")
    paused: bool = False
    template_flag: bool = Field(default=False, alias="templateFlag")
    href: Optional[str] = None
    web_url: Optional[str] = Field(default=None, alias="webUrl")
    project: Optional[ProjectReference] = None
    settings: Properties = Field(default_factory=Properties)
    parameters: Properties = Field(default_factory=Properties)
    steps: List[Step] = Field(default_factory=list)
    vcs_root_entries: VcsRootEntries = Field(
        default_factory=VcsRootEntries, alias="vcs-root-entries"
    )

    @field_validator("steps", mode="before")
    @classmethod
    def _parse_steps(cls, value: Any) -> List[Step]:
        return parse_steps(value)

    def to_create_payload(self, project_id: str) -> Dict[str, Any]:
        if not self.name:
            raise ValueError("build type name must be provided.")
        payload: Dict[str, Any] = {
            "name": self.name,
            "projectId": project_id,
            "project": {"id": project_id},
        }
        if self.id:
            payload["id"] = self.id
        if self.description:
            payload["description"] = self.description
        if self.settings.items:
            payload["settings"] = self.settings.to_payload()
        if self.parameters.items:
            payload["parameters"] = self.parameters.to_payload()
        if self.steps:
            payload["steps"] = {
                "count": len(self.steps),
                "step": [step.to_payload() for step in self.steps],
            }
        return payload


# --- Server ---


class ServerInfo(BaseTeamCityModel):
    version: str
    version_major: Optional[int] = Field(default=None, alias="versionMajor")
    version_minor: Optional[int] = Field(default=None, alias="versionMinor")
    build_number: Optional[str] = Field(default=None, alias="buildNumber")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    current_time: Optional[str] = Field(default=None, alias="currentTime")
    web_url: Optional[str] = Field(default=None, alias="webUrl")
