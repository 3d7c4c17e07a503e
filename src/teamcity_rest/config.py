from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

ADDR_ENV = "TEAMCITY_ADDR"
USER_ENV = "TEAMCITY_USER"
PASSWORD_ENV = "TEAMCITY_PASSWORD"
TOKEN_ENV = "TEAMCITY_TOKEN"


@dataclass(frozen=True)
class TeamCityConfig:
    base_url: str
    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None

    def missing(self) -> List[str]:
        """Names of the environment variables still needed to build a client."""
        missing: List[str] = []
        if not self.base_url:
            missing.append(ADDR_ENV)
        if not self.token and not (self.username and self.password):
            missing.append(f"{TOKEN_ENV} or {USER_ENV}/{PASSWORD_ENV}")
        return missing


def _env(name: str) -> Optional[str]:
    val = os.getenv(name, "").strip()
    return val or None


def load_env_config(*, use_dotenv: bool = True) -> TeamCityConfig:
    """Load TeamCity address and credentials from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    return TeamCityConfig(
        base_url=_env(ADDR_ENV) or "",
        username=_env(USER_ENV),
        password=_env(PASSWORD_ENV),
        token=_env(TOKEN_ENV),
    )


__all__ = [
    "TeamCityConfig",
    "load_env_config",
    "ADDR_ENV",
    "USER_ENV",
    "PASSWORD_ENV",
    "TOKEN_ENV",
]
