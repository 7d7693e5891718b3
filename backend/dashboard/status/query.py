from sqlalchemy.ext.asyncio import AsyncSession

from ..db.crud.server import search_servers
from ..models import StatusViewModel
from .aggregator import aggregate
from .prober import StatusProber


async def find_server_statuses(
    session: AsyncSession, prober: StatusProber, query: str = ""
) -> list[StatusViewModel]:
    """Live status of every server whose name contains ``query``."""
    records = await search_servers(session, query)
    return await aggregate(prober, records)
