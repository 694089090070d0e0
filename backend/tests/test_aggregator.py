"""
Status aggregation tests
"""

import pytest

from status_monitor.aggregator import aggregate, round_half_up, worst_status
from status_monitor.models import (
    CACHE_SERVICE,
    DISCORD_SERVICE,
    GITHUB_SERVICE,
    IMAGE_SERVICE,
    ProbeResult,
    ProbeStatus,
    ServiceStatistic,
)

OP = ProbeStatus.OPERATIONAL
DEG = ProbeStatus.DEGRADED
DOWN = ProbeStatus.DOWN


def results(statuses, times=(100, 200, 300, 400)):
    names = (DISCORD_SERVICE, GITHUB_SERVICE, IMAGE_SERVICE, CACHE_SERVICE)
    return {
        name: ProbeResult(status, time, f"{name} {status.value}")
        for name, status, time in zip(names, statuses, times)
    }


class TestWorstStatus:

    @pytest.mark.parametrize("statuses,expected", [
        ([OP, OP, DOWN, OP], DOWN),
        ([OP, DEG, OP, OP], DEG),
        ([OP, OP, OP, OP], OP),
        ([DEG, DOWN, DEG, OP], DOWN),
        ([], OP),
    ])
    def test_worst_status(self, statuses, expected):
        assert worst_status(statuses) is expected


class TestAggregate:

    def test_without_history_uses_defaults(self):
        status = aggregate(results([OP, OP, OP, OP]), [])

        assert status.status is OP
        assert status.uptime == 99.0
        assert status.response_time == 250
        assert status.total_incidents_7d == 0
        assert status.average_response_time_7d == 250
        assert status.cache_hit_rate == 99

    def test_counts_per_status(self):
        status = aggregate(results([OP, DEG, DOWN, OP]), [])

        assert status.status is DOWN
        assert (status.total, status.operational, status.degraded, status.down) == (4, 2, 1, 1)

    def test_uptime_blends_history_with_default(self):
        stats = [
            ServiceStatistic(DISCORD_SERVICE, uptime_percentage=100.0, incident_count=0, avg_response_time=120),
            ServiceStatistic(GITHUB_SERVICE, uptime_percentage=95.0, incident_count=3, avg_response_time=300),
        ]

        status = aggregate(results([OP, OP, OP, OP]), stats)

        # (100 + 95 + 99 + 99) / 4 = 98.25
        assert status.uptime == 98.3
        assert status.total_incidents_7d == 3
        assert status.average_response_time_7d == 210

    def test_unrelated_stats_count_toward_incidents_only(self):
        stats = [ServiceStatistic("Legacy Service", uptime_percentage=10.0, incident_count=7, avg_response_time=50)]

        status = aggregate(results([OP, OP, OP, OP]), stats)

        assert status.uptime == 99.0
        assert status.total_incidents_7d == 7
        assert status.average_response_time_7d == 50

    def test_response_time_rounds_half_up(self):
        status = aggregate(results([OP, OP, OP, OP], times=(1, 1, 1, 3)), [])

        # mean 1.5
        assert status.response_time == 2

    def test_cache_hit_rate_from_cache_stat(self):
        stats = [ServiceStatistic(CACHE_SERVICE, uptime_percentage=97.6)]

        status = aggregate(results([OP, OP, OP, OP]), stats)

        assert status.cache_hit_rate == 98

    def test_stat_row_with_nulls(self):
        stat = ServiceStatistic.from_row({
            "service_name": DISCORD_SERVICE,
            "uptime_percentage": None,
            "incident_count": None,
            "avg_response_time": None,
        })

        assert stat.uptime_percentage == 99.0
        assert stat.incident_count == 0
        assert stat.avg_response_time == 0.0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(98.25, 1) == 98.3
    assert round_half_up(99.0, 1) == 99.0


def test_probe_result_latency_is_never_negative():
    assert ProbeResult(OP, -5, "clock skew").response_time == 0
