"""
Build step constructors.

Each constructor validates its inputs and returns an unsaved step (no id);
`BuildTypes.add_step` sends it and returns the server's copy with the id
assigned.
"""

from __future__ import annotations

from typing import Dict

from .models import (
    STEP_TYPE_COMMAND_LINE,
    STEP_TYPE_POWERSHELL,
    CommandLineStep,
    PowershellStep,
    Properties,
    Step,
    parse_step,
    parse_steps,
)

STEP_MODE_DEFAULT = "default"

POWERSHELL_MODE_FILE = "FILE"
POWERSHELL_MODE_CODE = "CODE"


def _require(value: str, what: str) -> None:
    if not value or not value.strip():
        raise ValueError(f"{what} is required.")


def new_step_command_line_executable(
    name: str, executable: str, args: str = ""
) -> CommandLineStep:
    _require(executable, "executable")
    props: Dict[str, str] = {"command.executable": executable}
    if args:
        props["command.parameters"] = args
    props["teamcity.step.mode"] = STEP_MODE_DEFAULT
    return CommandLineStep(name=name, properties=Properties.from_dict(props))


def new_step_command_line_script(name: str, script: str) -> CommandLineStep:
    _require(script, "script")
    props = {
        "script.content": script,
        "use.custom.script": "true",
        "teamcity.step.mode": STEP_MODE_DEFAULT,
    }
    return CommandLineStep(name=name, properties=Properties.from_dict(props))


def _powershell(
    name: str, mode: str, source: Dict[str, str], args: str
) -> PowershellStep:
    props: Dict[str, str] = {"jetbrains_powershell_script_mode": mode, **source}
    if args:
        props["jetbrains_powershell_scriptArguments"] = args
    props.update(
        {
            "jetbrains_powershell_execution": "PS1",
            "jetbrains_powershell_noprofile": "true",
            "teamcity.step.mode": STEP_MODE_DEFAULT,
        }
    )
    return PowershellStep(name=name, properties=Properties.from_dict(props))


def new_step_powershell_script_file(
    name: str, script_file: str, args: str = ""
) -> PowershellStep:
    _require(script_file, "script_file")
    return _powershell(
        name,
        POWERSHELL_MODE_FILE,
        {"jetbrains_powershell_script_file": script_file},
        args,
    )


def new_step_powershell_script_code(
    name: str, code: str, args: str = ""
) -> PowershellStep:
    _require(code, "code")
    return _powershell(
        name,
        POWERSHELL_MODE_CODE,
        {"jetbrains_powershell_script_code": code},
        args,
    )


__all__ = [
    "STEP_TYPE_COMMAND_LINE",
    "STEP_TYPE_POWERSHELL",
    "Step",
    "CommandLineStep",
    "PowershellStep",
    "new_step_command_line_executable",
    "new_step_command_line_script",
    "new_step_powershell_script_file",
    "new_step_powershell_script_code",
    "parse_step",
    "parse_steps",
]
