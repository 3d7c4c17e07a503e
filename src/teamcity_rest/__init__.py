"""teamcity_rest package exports."""

from .client import TeamCityClient
from .config import TeamCityConfig, load_env_config
from .errors import (
    AuthenticationError,
    ConflictError,
    ModelValidationError,
    NotFoundError,
    ParseError,
    TeamCityClientError,
    TeamCityHTTPError,
    TransportError,
    ValidationError,
)
from .events import log_event
from .logging import setup_logging
from .models import (
    BuildType,
    BuildTypeReference,
    CommandLineStep,
    PowershellStep,
    Project,
    ProjectReference,
    Properties,
    Property,
    ServerInfo,
    Step,
    VcsRoot,
    VcsRootEntries,
    VcsRootEntry,
    VcsRootReference,
)
from .resources import new_git_vcs_root
from .settings import BuildTypeSettingsBuilder, settings_builder
from .steps import (
    STEP_TYPE_COMMAND_LINE,
    STEP_TYPE_POWERSHELL,
    new_step_command_line_executable,
    new_step_command_line_script,
    new_step_powershell_script_code,
    new_step_powershell_script_file,
)

__all__ = [
    # Client
    "TeamCityClient",
    "TeamCityConfig",
    "load_env_config",
    # Exceptions
    "TeamCityClientError",
    "TeamCityHTTPError",
    "TransportError",
    "ParseError",
    "ModelValidationError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    # Models
    "Property",
    "Properties",
    "Project",
    "ProjectReference",
    "BuildType",
    "BuildTypeReference",
    "VcsRoot",
    "VcsRootReference",
    "VcsRootEntry",
    "VcsRootEntries",
    "ServerInfo",
    # Steps
    "Step",
    "CommandLineStep",
    "PowershellStep",
    "STEP_TYPE_COMMAND_LINE",
    "STEP_TYPE_POWERSHELL",
    "new_step_command_line_executable",
    "new_step_command_line_script",
    "new_step_powershell_script_file",
    "new_step_powershell_script_code",
    # Builders
    "BuildTypeSettingsBuilder",
    "settings_builder",
    "new_git_vcs_root",
    # Logging
    "setup_logging",
    "log_event",
]
