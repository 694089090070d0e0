"""
Status API Response Models
"""

from typing import List

from pydantic import BaseModel, Field


class ServiceCounts(BaseModel):
    """Number of services per status"""
    total: int
    operational: int
    degraded: int
    down: int


class PerformanceSummary(BaseModel):
    cache_hit_rate: int
    total_incidents_7d: int
    average_response_time_7d: int


class StatusResponse(BaseModel):
    """Response model for GET /api/status"""
    status: str = Field(..., description="Worst status across all probes")
    uptime: float = Field(..., description="Mean historical uptime, one decimal")
    responseTime: int = Field(..., description="Mean live probe latency (ms)")
    lastChecked: str
    region: str
    version: str
    services: ServiceCounts
    performance: PerformanceSummary


class ServiceStatusItem(BaseModel):
    name: str
    status: str
    responseTime: int
    uptime: float
    lastChecked: str
    message: str


class ServicesStatusResponse(BaseModel):
    """Response model for GET /api/status/services"""
    services: List[ServiceStatusItem]
