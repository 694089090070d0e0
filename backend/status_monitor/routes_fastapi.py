"""
Status API Routes

- GET /api/status            - Overall verdict, uptime and 7 day performance
- GET /api/status/services   - Per-service live status with 24h uptime
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from .schemas import ServicesStatusResponse, StatusResponse
from .service import StatusService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/status", tags=["Status"])


def _service(request: Request) -> StatusService:
    return request.app.state.status_service


@router.get("", response_model=StatusResponse)
async def get_status(request: Request):
    """
    Aggregate health of the API.

    Runs every probe concurrently, blends in historical uptime, and
    schedules the probe results for persistence without waiting on it.
    """
    try:
        return await _service(request).get_overall_status()
    except Exception as e:
        logger.exception(f"[StatusAPI] Status check failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"status": "down", "error": "Status check system failure"},
        )


@router.get("/services", response_model=ServicesStatusResponse)
async def get_services_status(request: Request):
    """Live status of each monitored service."""
    try:
        return await _service(request).get_services_status()
    except Exception as e:
        logger.exception(f"[StatusAPI] Service status check failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Service status check failed."},
        )
