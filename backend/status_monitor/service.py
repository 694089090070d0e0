"""
Status Service

Runs a health check cycle and shapes the two status payloads:
- overall status (aggregate verdict + 7 day performance)
- per-service status (live probe + 24h uptime)
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from .aggregator import aggregate
from .history_store import HistoryStore
from .log_writer import StatusLogWriter
from .models import DEFAULT_UPTIME, ServiceStatistic
from .probes import ProbeSet

logger = logging.getLogger(__name__)

STATISTICS_WINDOW_DAYS = 7
STATUS_REGION = "Global"
STATUS_VERSION = "1.0.0"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class StatusService:
    def __init__(self, probes: ProbeSet, store: HistoryStore, writer: StatusLogWriter):
        self.probes = probes
        self.store = store
        self.writer = writer

    async def _statistics(self) -> List[ServiceStatistic]:
        try:
            rows = await self.store.get_all_service_statistics(STATISTICS_WINDOW_DAYS)
            return [ServiceStatistic.from_row(row) for row in rows]
        except Exception as e:
            logger.error(f"[StatusService] Statistics unavailable, using defaults: {e}")
            return []

    async def _uptime_summary(self) -> Dict[str, Dict[str, Any]]:
        try:
            rows = await self.store.get_uptime_summary()
            return {row["service_name"]: row for row in rows if "service_name" in row}
        except Exception as e:
            logger.error(f"[StatusService] Uptime summary unavailable, using defaults: {e}")
            return {}

    async def get_overall_status(self) -> Dict[str, Any]:
        """Payload for GET /api/status."""
        probe_results, stats = await asyncio.gather(
            self.probes.run_all(),
            self._statistics(),
        )
        self.writer.submit(probe_results)

        result = aggregate(probe_results, stats)
        logger.info(f"[StatusService] Overall status: {result.status.value} ({result.response_time}ms)")

        return {
            "status": result.status.value,
            "uptime": result.uptime,
            "responseTime": result.response_time,
            "lastChecked": _now_iso(),
            "region": STATUS_REGION,
            "version": STATUS_VERSION,
            "services": {
                "total": result.total,
                "operational": result.operational,
                "degraded": result.degraded,
                "down": result.down,
            },
            "performance": {
                "cache_hit_rate": result.cache_hit_rate,
                "total_incidents_7d": result.total_incidents_7d,
                "average_response_time_7d": result.average_response_time_7d,
            },
        }

    async def get_services_status(self) -> Dict[str, Any]:
        """Payload for GET /api/status/services."""
        probe_results, summary = await asyncio.gather(
            self.probes.run_all(),
            self._uptime_summary(),
        )
        self.writer.submit(probe_results)

        services = []
        for name, result in probe_results.items():
            row = summary.get(name)
            uptime_24h = row.get("uptime_24h") if row else None
            services.append({
                "name": name,
                "status": result.status.value,
                "responseTime": result.response_time,
                "uptime": DEFAULT_UPTIME if uptime_24h is None else float(uptime_24h),
                "lastChecked": _now_iso(),
                "message": result.message,
            })
        return {"services": services}
