"""
NoteShare Backend — Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Probes the database (SELECT 1) and the blob store (write probe).
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   database connected and storage writable (HTTP 200)
    - unhealthy: either dependency down (HTTP 503)

No authentication: probes carry no bearer token.
"""

import logging
import time

from fastapi import APIRouter, Response, status
from sqlalchemy import text

from noteshare import __version__
from noteshare.database import engine
from noteshare.schemas.common import HealthResponse
from noteshare.services.blob_store import blob_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the status of the service, its database and its file storage.",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Storage ─────────────────────────────────────────────────────
    if not blob_store.is_writable():
        storage_status = "unavailable"
        overall = "unhealthy"

    if overall != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
