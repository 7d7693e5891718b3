from .aggregator import aggregate
from .prober import StatusProber, StatusQuery, mcstatus_query
from .query import find_server_statuses

__all__ = [
    "StatusProber",
    "StatusQuery",
    "aggregate",
    "find_server_statuses",
    "mcstatus_query",
]
