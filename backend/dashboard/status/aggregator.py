import asyncio
from typing import Sequence

from ..models import ServerRecord, StatusViewModel
from .prober import StatusProber


async def aggregate(
    prober: StatusProber, records: Sequence[ServerRecord]
) -> list[StatusViewModel]:
    """Probe every record concurrently.

    Waits for all probes and returns their views in the order of ``records``.
    """
    async with asyncio.TaskGroup() as tg:
        tasks = [tg.create_task(prober.probe(record)) for record in records]
    return [task.result() for task in tasks]
