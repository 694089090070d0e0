"""
Status Aggregator

Blends live probe results with historical statistics into one verdict.
"""

import math
from typing import Dict, Iterable, Mapping, Sequence

from .models import (
    CACHE_SERVICE,
    DEFAULT_UPTIME,
    AggregateStatus,
    ProbeResult,
    ProbeStatus,
    ServiceStatistic,
)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero for positive values, as status consumers expect."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def worst_status(statuses: Iterable[ProbeStatus]) -> ProbeStatus:
    """Highest severity wins; operational is the baseline."""
    worst = ProbeStatus.OPERATIONAL
    for status in statuses:
        if status.severity > worst.severity:
            worst = status
    return worst


def aggregate(
    probe_results: Mapping[str, ProbeResult],
    historical_stats: Sequence[ServiceStatistic],
) -> AggregateStatus:
    """
    Combine probe results with historical statistics.

    Args:
        probe_results: Probe outcomes keyed by service label
        historical_stats: Store statistics; services without a row
            count as DEFAULT_UPTIME

    Returns:
        AggregateStatus for this health check cycle
    """
    results = list(probe_results.values())
    stats_map: Dict[str, ServiceStatistic] = {s.service_name: s for s in historical_stats}

    overall = worst_status(r.status for r in results)

    uptimes = [
        stats_map[name].uptime_percentage if name in stats_map else DEFAULT_UPTIME
        for name in probe_results
    ]
    uptime = round_half_up(sum(uptimes) / len(uptimes), 1) if uptimes else DEFAULT_UPTIME

    response_time = (
        int(round_half_up(sum(r.response_time for r in results) / len(results)))
        if results else 0
    )

    total_incidents = sum(s.incident_count for s in historical_stats)
    if historical_stats:
        historical_avg = int(round_half_up(
            sum(s.avg_response_time for s in historical_stats) / len(historical_stats)
        ))
    else:
        historical_avg = response_time

    cache_stat = stats_map.get(CACHE_SERVICE)
    cache_hit_rate = int(round_half_up(
        cache_stat.uptime_percentage if cache_stat else DEFAULT_UPTIME
    ))

    return AggregateStatus(
        status=overall,
        uptime=uptime,
        response_time=response_time,
        total=len(results),
        operational=sum(1 for r in results if r.status is ProbeStatus.OPERATIONAL),
        degraded=sum(1 for r in results if r.status is ProbeStatus.DEGRADED),
        down=sum(1 for r in results if r.status is ProbeStatus.DOWN),
        cache_hit_rate=cache_hit_rate,
        total_incidents_7d=total_incidents,
        average_response_time_7d=historical_avg,
    )
