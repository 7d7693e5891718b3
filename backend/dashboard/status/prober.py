from typing import Any, Awaitable, Callable, Literal

from mcstatus import JavaServer

from ..config import ProbeSettings
from ..logger import logger
from ..models import ServerPublic, ServerRecord, StatusViewModel

# (host, port, timeout_seconds) -> status response exposing
# players.online, players.max, version.name and version.protocol
StatusQuery = Callable[[str, int, float], Awaitable[Any]]


async def mcstatus_query(host: str, port: int, timeout: float) -> Any:
    """Query a Java edition server with the Server List Ping protocol."""
    server = JavaServer(host, port, timeout=timeout)
    return await server.async_status()


def server_type(record: ServerRecord) -> Literal["Bedrock", "Java"]:
    return "Bedrock" if record.bedrock_compatible else "Java"


class StatusProber:
    """Turns a stored server record into a live status view.

    ``probe`` never raises: every failure of the status query is reported as
    an offline view.
    """

    def __init__(self, probe_settings: ProbeSettings, query: StatusQuery = mcstatus_query):
        self._settings = probe_settings
        self._query = query

    def icon_url(self, record: ServerRecord) -> str:
        if record.icon_url:
            return record.icon_url
        return self._settings.favicon_url_template.format(
            host=record.host, port=record.port
        )

    def software(self, protocol: int) -> str:
        # Protocol numbers identify game versions, not server software.
        # The result is only a hint.
        return "Purpur" if protocol == self._settings.purpur_protocol else "Java"

    async def probe(self, record: ServerRecord) -> StatusViewModel:
        stored = ServerPublic.from_record(record).model_dump()
        stored["iconUrl"] = self.icon_url(record)

        try:
            result = await self._query(
                record.host, record.port, self._settings.timeout_seconds
            )
            return StatusViewModel(
                **stored,
                online=True,
                players=result.players.online,
                maxPlayers=result.players.max,
                version=result.version.name,
                software=self.software(result.version.protocol),
                type=server_type(record),
            )
        except Exception as e:
            logger.debug(
                f"Status probe failed for {record.host}:{record.port} "
                f"(server {record.id}): {type(e).__name__}: {e}"
            )
            return StatusViewModel(
                **stored,
                online=False,
                players=0,
                maxPlayers=0,
                version=None,
                software=None,
                type=server_type(record),
            )
