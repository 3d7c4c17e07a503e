"""
Fluent builder for build type settings.

    settings = (
        settings_builder.configuration_type("composite")
        .personal_build_trigger(False)
        .artifact_rules("**/*.zip")
        .build()
    )

Every call returns a new builder, so a partially configured builder can be
shared and extended without leaking values between callers.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from .models import Properties

CONFIGURATION_TYPES = frozenset({"REGULAR", "COMPOSITE", "DEPLOYMENT"})
CHECKOUT_MODES = frozenset({"ON_AGENT", "ON_SERVER", "MANUAL"})


def _bool(value: bool) -> str:
    return "true" if value else "false"


class BuildTypeSettingsBuilder:
    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    def _with(self, name: str, value: str) -> "BuildTypeSettingsBuilder":
        values = dict(self._values)
        # Re-setting a name moves it to the end, matching the order it is sent.
        values.pop(name, None)
        values[name] = value
        return BuildTypeSettingsBuilder(values)

    def configuration_type(self, value: str) -> "BuildTypeSettingsBuilder":
        normalized = (value or "").strip().upper()
        if normalized not in CONFIGURATION_TYPES:
            raise ValueError(
                f"configuration type must be one of {sorted(CONFIGURATION_TYPES)}, "
                f"got {value!r}"
            )
        return self._with("buildConfigurationType", normalized)

    def personal_build_trigger(self, allowed: bool) -> "BuildTypeSettingsBuilder":
        return self._with("allowPersonalBuildTriggering", _bool(allowed))

    def artifact_rules(self, rules: str) -> "BuildTypeSettingsBuilder":
        return self._with("artifactRules", rules)

    def build_counter(self, counter: int) -> "BuildTypeSettingsBuilder":
        if counter < 1:
            raise ValueError("build counter must be >= 1")
        return self._with("buildNumberCounter", str(counter))

    def build_number_format(self, pattern: str) -> "BuildTypeSettingsBuilder":
        return self._with("buildNumberPattern", pattern)

    def concurrent_builds(self, limit: int) -> "BuildTypeSettingsBuilder":
        """Maximum number of simultaneously running builds; 0 is unlimited."""
        if limit < 0:
            raise ValueError("concurrent builds must be >= 0")
        return self._with("maximumNumberOfBuilds", str(limit))

    def checkout_directory(self, path: str) -> "BuildTypeSettingsBuilder":
        return self._with("checkoutDirectory", path)

    def checkout_mode(self, mode: str) -> "BuildTypeSettingsBuilder":
        normalized = (mode or "").strip().upper()
        if normalized not in CHECKOUT_MODES:
            raise ValueError(
                f"checkout mode must be one of {sorted(CHECKOUT_MODES)}, got {mode!r}"
            )
        return self._with("checkoutMode", normalized)

    def clean_build(self, enabled: bool) -> "BuildTypeSettingsBuilder":
        return self._with("cleanBuild", _bool(enabled))

    def detect_hanging_builds(self, enabled: bool) -> "BuildTypeSettingsBuilder":
        return self._with("enableHangingBuildsDetection", _bool(enabled))

    def execution_timeout(self, minutes: int) -> "BuildTypeSettingsBuilder":
        if minutes < 0:
            raise ValueError("execution timeout must be >= 0")
        return self._with("executionTimeoutMin", str(minutes))

    def build(self) -> Properties:
        return Properties.from_dict(self._values)

    def __repr__(self) -> str:
        return f"BuildTypeSettingsBuilder({self._values!r})"


settings_builder = BuildTypeSettingsBuilder()


__all__ = [
    "BuildTypeSettingsBuilder",
    "settings_builder",
    "CONFIGURATION_TYPES",
    "CHECKOUT_MODES",
]
