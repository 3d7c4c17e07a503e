from __future__ import annotations

from typing import TYPE_CHECKING

from ..models import ServerInfo

if TYPE_CHECKING:
    from ..client import TeamCityClient

RESOURCE = "server"


class Server:
    def __init__(self, client: "TeamCityClient"):
        self._client = client

    async def info(self) -> ServerInfo:
        return await self._client.request_model(
            ServerInfo, "GET", "/server", resource=RESOURCE
        )

    async def validate(self) -> bool:
        """Check address and credentials; errors propagate unchanged."""
        await self.info()
        return True
