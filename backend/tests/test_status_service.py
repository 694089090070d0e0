"""
Status service and log writer tests
"""

import pytest

from status_monitor.log_writer import StatusLogWriter
from status_monitor.models import (
    CACHE_SERVICE,
    DISCORD_SERVICE,
    GITHUB_SERVICE,
    SERVICE_NAMES,
    ProbeResult,
    ProbeStatus,
)
from status_monitor.history_store import MemoryHistoryStore
from status_monitor.probes import ProbeSet
from status_monitor.service import StatusService
from conftest import PUBLIC_BASE_URL, FailingHistoryStore, StaticHistoryStore


@pytest.fixture
def probes(discord_client, github_client, http_client, memory_store):
    return ProbeSet(discord_client, github_client, http_client, memory_store, PUBLIC_BASE_URL)


def build_service(probes, store):
    return StatusService(probes, store, StatusLogWriter(store))


class TestStatusLogWriter:

    @pytest.mark.asyncio
    async def test_one_write_per_probe(self):
        store = MemoryHistoryStore()
        writer = StatusLogWriter(store)
        results = {
            DISCORD_SERVICE: ProbeResult(ProbeStatus.OPERATIONAL, 10, "ok"),
            GITHUB_SERVICE: ProbeResult(ProbeStatus.DOWN, 20, "nope"),
        }

        writer.submit(results)
        await writer.drain()

        assert list(writer.attempts) == [(DISCORD_SERVICE, "operational"), (GITHUB_SERVICE, "down")]
        assert writer.pending == 0
        stats = {s["service_name"]: s for s in await store.get_all_service_statistics()}
        assert stats[GITHUB_SERVICE]["incident_count"] == 1

    @pytest.mark.asyncio
    async def test_failures_are_logged_not_raised(self, caplog):
        store = FailingHistoryStore()
        writer = StatusLogWriter(store)

        writer.submit({CACHE_SERVICE: ProbeResult(ProbeStatus.OPERATIONAL, 1, "Cache OK")})
        await writer.drain()

        assert store.save_calls == 1
        assert writer.failures == 1
        assert "Failed to save status log" in caplog.text

    @pytest.mark.asyncio
    async def test_recent_attempts_are_bounded(self):
        writer = StatusLogWriter(MemoryHistoryStore(), max_attempts=3)

        for status in (ProbeStatus.OPERATIONAL, ProbeStatus.DEGRADED, ProbeStatus.DOWN, ProbeStatus.DOWN):
            writer.submit({DISCORD_SERVICE: ProbeResult(status, 5, "msg")})
        await writer.drain()

        assert list(writer.attempts) == [
            (DISCORD_SERVICE, "degraded"),
            (DISCORD_SERVICE, "down"),
            (DISCORD_SERVICE, "down"),
        ]


class TestStatusService:

    @pytest.mark.asyncio
    async def test_overall_status_all_operational(self, probes):
        store = MemoryHistoryStore()
        service = build_service(probes, store)

        payload = await service.get_overall_status()
        await service.writer.drain()

        assert payload["status"] == "operational"
        assert payload["uptime"] == 99.0
        assert payload["region"] == "Global"
        assert payload["version"] == "1.0.0"
        assert payload["services"] == {"total": 4, "operational": 4, "degraded": 0, "down": 0}
        assert payload["performance"]["total_incidents_7d"] == 0
        assert payload["lastChecked"].endswith("Z")
        assert [name for name, _ in service.writer.attempts] == list(SERVICE_NAMES)

    @pytest.mark.asyncio
    async def test_overall_status_reflects_worst_probe(self, probes, upstream):
        upstream.public_content_type = "text/html"
        service = build_service(probes, MemoryHistoryStore())

        payload = await service.get_overall_status()
        await service.writer.drain()

        assert payload["status"] == "degraded"
        assert payload["services"]["degraded"] == 1

    @pytest.mark.asyncio
    async def test_unreachable_store_uses_synthetic_figures(self, probes):
        store = FailingHistoryStore()
        service = build_service(probes, store)

        payload = await service.get_overall_status()
        await service.writer.drain()

        assert payload["uptime"] == 99.0
        assert payload["performance"]["total_incidents_7d"] == 0
        assert payload["performance"]["cache_hit_rate"] == 99
        assert store.save_calls == 4

    @pytest.mark.asyncio
    async def test_history_blended_into_uptime(self, probes):
        store = StaticHistoryStore(statistics=[
            {"service_name": DISCORD_SERVICE, "uptime_percentage": 95.0, "incident_count": 4, "avg_response_time": 300},
            {"service_name": CACHE_SERVICE, "uptime_percentage": 100.0, "incident_count": 0, "avg_response_time": 1},
        ])
        service = build_service(probes, store)

        payload = await service.get_overall_status()
        await service.writer.drain()

        # (95 + 99 + 99 + 100) / 4 = 98.25
        assert payload["uptime"] == 98.3
        assert payload["performance"] == {
            "cache_hit_rate": 100,
            "total_incidents_7d": 4,
            "average_response_time_7d": 151,
        }

    @pytest.mark.asyncio
    async def test_services_status_uses_24h_uptime(self, probes):
        store = StaticHistoryStore(summary=[{"service_name": GITHUB_SERVICE, "uptime_24h": 97.25}])
        service = build_service(probes, store)

        payload = await service.get_services_status()
        await service.writer.drain()

        services = {s["name"]: s for s in payload["services"]}
        assert list(services) == list(SERVICE_NAMES)
        assert services[GITHUB_SERVICE]["uptime"] == 97.25
        assert services[DISCORD_SERVICE]["uptime"] == 99.0
        assert services[CACHE_SERVICE]["message"] == "Cache OK"
        assert services[CACHE_SERVICE]["status"] == "operational"

    @pytest.mark.asyncio
    async def test_services_status_with_unreachable_store(self, probes):
        service = build_service(probes, FailingHistoryStore())

        payload = await service.get_services_status()
        await service.writer.drain()

        assert all(s["uptime"] == 99.0 for s in payload["services"])
