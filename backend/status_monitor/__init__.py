"""
Status Monitor Module

Health probes, uptime aggregation and status history for the API.

Features:
- Four concurrent probes (Discord, GitHub, image pipeline, cache)
- Worst-status aggregation blended with historical uptime
- Fire-and-forget persistence of probe results
- Supabase or in-memory history backends
"""

from .aggregator import aggregate
from .history_store import HistoryStore, HistoryStoreError, MemoryHistoryStore, SupabaseHistoryStore
from .log_writer import StatusLogWriter
from .models import AggregateStatus, ProbeResult, ProbeStatus, ServiceStatistic
from .probes import ProbeSet
from .routes_fastapi import router
from .service import StatusService

__all__ = [
    "router",
    "aggregate",
    "AggregateStatus",
    "HistoryStore",
    "HistoryStoreError",
    "MemoryHistoryStore",
    "SupabaseHistoryStore",
    "ProbeResult",
    "ProbeSet",
    "ProbeStatus",
    "ServiceStatistic",
    "StatusLogWriter",
    "StatusService",
]
