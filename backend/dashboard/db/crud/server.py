from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import ServerRecord


async def create_server(
    session: AsyncSession,
    *,
    name: Optional[str],
    host: Optional[str],
    port: Optional[int],
    info: Optional[str],
    bedrock_compatible: Optional[bool],
    geyser: Optional[bool],
    created_by: str,
) -> ServerRecord:
    """Insert a new server record and return it with its assigned id."""
    server = ServerRecord(
        name=name,
        host=host,
        port=port,
        info=info,
        bedrock_compatible=bedrock_compatible,
        geyser=geyser,
        created_by=created_by,
    )
    session.add(server)
    await session.commit()
    await session.refresh(server)
    return server


async def get_all_servers(session: AsyncSession) -> list[ServerRecord]:
    """Get all servers in insertion order."""
    result = await session.scalars(select(ServerRecord).order_by(ServerRecord.id))
    return list(result.all())


async def search_servers(session: AsyncSession, query: str) -> list[ServerRecord]:
    """Get servers whose name contains ``query``, ignoring case.

    The query is matched literally. An empty query matches every server.
    Names are compared with ``str.casefold`` because SQLite's ``lower()``
    only folds ASCII letters.
    """
    servers = await get_all_servers(session)
    if not query:
        return servers

    needle = query.casefold()
    return [s for s in servers if needle in (s.name or "").casefold()]
