"""
DayNotes Backend — Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Asks the backing store for a lightweight connectivity check.
Who:   Called by container health checks, load balancers and monitoring.

Status levels:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from daynotes import __version__
from daynotes.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """Probe the backing store and report aggregate status and uptime."""
    store_ok = False
    try:
        store_ok = await request.app.state.store.health_check()
    except Exception as e:
        logger.warning("Health check: store unreachable: %s", str(e))

    if not store_ok:
        response.status_code = 503

    return HealthResponse(
        status="healthy" if store_ok else "unhealthy",
        version=__version__,
        store="connected" if store_ok else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
