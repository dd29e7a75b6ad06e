"""
CuriousDog Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the database (SELECT 1) and that picture storage is writable.
Who:   Docker health checks, load balancers, monitoring.

Status levels:
    - healthy:   database reachable and storage writable
    - degraded:  database reachable, storage not writable (uploads fail, feeds work)
    - unhealthy: database unreachable
"""

import logging
import os
import time

from fastapi import APIRouter
from sqlalchemy import text

from app import __version__
from app.database import engine
from app.schemas.common import HealthResponse
from app.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not os.access(file_service.storage_root, os.W_OK):
        storage_status = "unavailable"
        if overall == "healthy":
            overall = "degraded"
        logger.warning("Health check: storage root not writable: %s", file_service.storage_root)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
