"""
Status Monitor Data Models

- ProbeStatus: operational / degraded / down, with severity ranking
- ProbeResult: outcome of one health probe
- ServiceStatistic: historical figures read from the history store
- AggregateStatus: combined verdict for one health check cycle
- StatusLog: a persisted probe outcome
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ProbeStatus(str, Enum):
    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    DOWN = "down"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    ProbeStatus.OPERATIONAL: 1,
    ProbeStatus.DEGRADED: 2,
    ProbeStatus.DOWN: 3,
}


# Service labels used for persisted logs and historical lookups
DISCORD_SERVICE = "Discord API Gateway"
GITHUB_SERVICE = "GitHub API Gateway"
IMAGE_SERVICE = "Image Processing Engine"
CACHE_SERVICE = "Cache & Rate Limiting"

SERVICE_NAMES = (DISCORD_SERVICE, GITHUB_SERVICE, IMAGE_SERVICE, CACHE_SERVICE)

DEFAULT_UPTIME = 99.0


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single probe. response_time is in milliseconds."""
    status: ProbeStatus
    response_time: int
    message: str

    def __post_init__(self):
        if self.response_time < 0:
            object.__setattr__(self, "response_time", 0)


@dataclass(frozen=True)
class ServiceStatistic:
    service_name: str
    uptime_percentage: float = DEFAULT_UPTIME
    incident_count: int = 0
    avg_response_time: float = 0.0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ServiceStatistic":
        """Build from a store row; null numeric columns read as defaults."""
        uptime = row.get("uptime_percentage")
        return cls(
            service_name=row.get("service_name", ""),
            uptime_percentage=DEFAULT_UPTIME if uptime is None else float(uptime),
            incident_count=int(row.get("incident_count") or 0),
            avg_response_time=float(row.get("avg_response_time") or 0),
        )


@dataclass(frozen=True)
class AggregateStatus:
    """Combined health verdict, computed per request and never stored."""
    status: ProbeStatus
    uptime: float
    response_time: int
    total: int
    operational: int
    degraded: int
    down: int
    cache_hit_rate: int
    total_incidents_7d: int
    average_response_time_7d: int


@dataclass
class StatusLog:
    service_name: str
    status: str
    response_time: int
    message: Optional[str]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_row(self) -> Dict[str, Any]:
        return {
            "service_name": self.service_name,
            "status": self.status,
            "response_time": self.response_time,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }
