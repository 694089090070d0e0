"""
Status History Store

Persists probe results and serves historical uptime figures.

Two backends share one interface:
- SupabaseHistoryStore: Supabase PostgREST tables/RPCs over httpx
- MemoryHistoryStore: in-process log list, for deployments without
  Supabase and for tests

Read methods never raise; on failure they log and return fallback data
(99.0% uptime, empty lists). Writes raise HistoryStoreError so callers
can decide how loud to be.
"""

import logging
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Dict, List, Optional

import httpx

from .models import DEFAULT_UPTIME, ProbeStatus, StatusLog

logger = logging.getLogger(__name__)

STORE_TIMEOUT = 5.0


class HistoryStoreError(Exception):
    """A write or maintenance call against the history store failed."""


def fallback_uptime_data(service_name: str, hours: int) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {
        "service_name": service_name,
        "uptime_percentage": DEFAULT_UPTIME,
        "total_checks": 0,
        "operational_checks": 0,
        "degraded_checks": 0,
        "down_checks": 0,
        "maintenance_checks": 0,
        "average_response_time": 0,
        "period_start": (now - timedelta(hours=hours)).isoformat(),
        "period_end": now.isoformat(),
    }


class HistoryStore:
    """Interface for status history backends."""

    async def save_status_log(
        self, service_name: str, status: str, response_time: int, message: Optional[str]
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def clean_old_logs(self, days_to_keep: int = 90) -> int:
        raise NotImplementedError

    async def get_service_uptime(self, service_name: str, hours: int = 24) -> Dict[str, Any]:
        raise NotImplementedError

    async def get_service_incidents(self, service_name: str, days: int = 7) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def get_uptime_summary(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def get_all_service_statistics(self, days: int = 30) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


# ============================================
# Supabase backend
# ============================================

class SupabaseHistoryStore(HistoryStore):
    """
    Talks to Supabase's REST layer directly.

    Expects a `status_logs` table, a `service_uptime_summary` view and the
    RPC functions get_service_uptime, get_service_incidents,
    get_service_statistics and cleanup_old_status_logs.
    """

    def __init__(
        self,
        supabase_url: str,
        service_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = STORE_TIMEOUT,
    ):
        self.rest_url = f"{supabase_url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self.headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        }

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    async def _rpc(self, function: str, params: Dict[str, Any]) -> Any:
        response = await self.http_client.post(
            f"{self.rest_url}/rpc/{function}",
            json=params,
            headers=self.headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def save_status_log(
        self, service_name: str, status: str, response_time: int, message: Optional[str]
    ) -> List[Dict[str, Any]]:
        row = StatusLog(service_name, status, response_time, message).to_row()
        try:
            response = await self.http_client.post(
                f"{self.rest_url}/status_logs",
                json=[row],
                headers={**self.headers, "Prefer": "return=representation"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[HistoryStore] Failed to save status log: {e}")
            raise HistoryStoreError(f"Failed to save status log: {e}") from e

    async def clean_old_logs(self, days_to_keep: int = 90) -> int:
        try:
            data = await self._rpc("cleanup_old_status_logs", {"days_to_keep": days_to_keep})
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[HistoryStore] Failed to clean old logs: {e}")
            raise HistoryStoreError(f"Failed to clean old logs: {e}") from e

        deleted = 0
        if isinstance(data, list) and data:
            deleted = int(data[0].get("deleted_count") or 0)
        logger.info(f"[HistoryStore] Removed logs older than {days_to_keep} days: {deleted} records deleted")
        return deleted

    async def get_service_uptime(self, service_name: str, hours: int = 24) -> Dict[str, Any]:
        try:
            data = await self._rpc(
                "get_service_uptime",
                {"service_name_param": service_name, "hours_back": hours},
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[HistoryStore] Failed to get uptime for {service_name}: {e}")
            return fallback_uptime_data(service_name, hours)
        if isinstance(data, list) and data:
            return data[0]
        return fallback_uptime_data(service_name, hours)

    async def get_service_incidents(self, service_name: str, days: int = 7) -> List[Dict[str, Any]]:
        try:
            data = await self._rpc(
                "get_service_incidents",
                {"service_name_param": service_name, "days_back": days},
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[HistoryStore] Failed to get incidents for {service_name}: {e}")
            return []
        return data or []

    async def get_uptime_summary(self) -> List[Dict[str, Any]]:
        try:
            response = await self.http_client.get(
                f"{self.rest_url}/service_uptime_summary",
                params={"select": "*", "order": "service_name"},
                headers=self.headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json() or []
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[HistoryStore] Failed to get uptime summary: {e}")
            return []

    async def get_all_service_statistics(self, days: int = 30) -> List[Dict[str, Any]]:
        try:
            data = await self._rpc("get_service_statistics", {"days_back": days})
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[HistoryStore] Failed to get service stats: {e}")
            return []
        return data or []


# ============================================
# In-memory backend
# ============================================

class MemoryHistoryStore(HistoryStore):
    """
    Keeps status logs in process memory.

    Uptime counts operational and degraded checks as "up"; any
    non-operational check is an incident.
    """

    def __init__(self, max_logs: int = 100_000):
        self._logs: List[StatusLog] = []
        self._lock = Lock()
        self._max_logs = max_logs

    async def save_status_log(
        self, service_name: str, status: str, response_time: int, message: Optional[str]
    ) -> List[Dict[str, Any]]:
        log = StatusLog(service_name, status, response_time, message)
        with self._lock:
            self._logs.append(log)
            if len(self._logs) > self._max_logs:
                del self._logs[: len(self._logs) - self._max_logs]
        return [log.to_row()]

    async def clean_old_logs(self, days_to_keep: int = 90) -> int:
        cutoff = datetime.now(timezone.utc) - timedelta(days=days_to_keep)
        with self._lock:
            before = len(self._logs)
            self._logs = [log for log in self._logs if log.timestamp >= cutoff]
            deleted = before - len(self._logs)
        logger.info(f"[HistoryStore] Removed logs older than {days_to_keep} days: {deleted} records deleted")
        return deleted

    def _window(self, service_name: str, since: datetime) -> List[StatusLog]:
        with self._lock:
            return [
                log for log in self._logs
                if log.service_name == service_name and log.timestamp >= since
            ]

    def _service_names(self) -> List[str]:
        with self._lock:
            return sorted({log.service_name for log in self._logs})

    @staticmethod
    def _uptime(logs: List[StatusLog]) -> float:
        if not logs:
            return DEFAULT_UPTIME
        up = sum(1 for log in logs if log.status != ProbeStatus.DOWN.value)
        return round(up / len(logs) * 100, 2)

    async def get_service_uptime(self, service_name: str, hours: int = 24) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        since = now - timedelta(hours=hours)
        logs = self._window(service_name, since)
        if not logs:
            return fallback_uptime_data(service_name, hours)

        def count(status: str) -> int:
            return sum(1 for log in logs if log.status == status)

        return {
            "service_name": service_name,
            "uptime_percentage": self._uptime(logs),
            "total_checks": len(logs),
            "operational_checks": count(ProbeStatus.OPERATIONAL.value),
            "degraded_checks": count(ProbeStatus.DEGRADED.value),
            "down_checks": count(ProbeStatus.DOWN.value),
            "maintenance_checks": count("maintenance"),
            "average_response_time": round(sum(log.response_time for log in logs) / len(logs)),
            "period_start": since.isoformat(),
            "period_end": now.isoformat(),
        }

    async def get_service_incidents(self, service_name: str, days: int = 7) -> List[Dict[str, Any]]:
        since = datetime.now(timezone.utc) - timedelta(days=days)
        return [
            log.to_row()
            for log in self._window(service_name, since)
            if log.status != ProbeStatus.OPERATIONAL.value
        ]

    async def get_uptime_summary(self) -> List[Dict[str, Any]]:
        now = datetime.now(timezone.utc)
        summary = []
        for name in self._service_names():
            last_day = self._window(name, now - timedelta(hours=24))
            last_week = self._window(name, now - timedelta(days=7))
            last_month = self._window(name, now - timedelta(days=30))
            latest = last_month[-1] if last_month else None
            summary.append({
                "service_name": name,
                "uptime_24h": self._uptime(last_day),
                "uptime_7d": self._uptime(last_week),
                "uptime_30d": self._uptime(last_month),
                "current_status": latest.status if latest else None,
                "last_checked": latest.timestamp.isoformat() if latest else None,
            })
        return summary

    async def get_all_service_statistics(self, days: int = 30) -> List[Dict[str, Any]]:
        since = datetime.now(timezone.utc) - timedelta(days=days)
        stats = []
        for name in self._service_names():
            logs = self._window(name, since)
            if not logs:
                continue
            stats.append({
                "service_name": name,
                "uptime_percentage": self._uptime(logs),
                "incident_count": sum(1 for log in logs if log.status != ProbeStatus.OPERATIONAL.value),
                "avg_response_time": round(sum(log.response_time for log in logs) / len(logs)),
            })
        return stats
