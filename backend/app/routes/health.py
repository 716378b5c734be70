"""
CallBoard Backend — Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and reports whether the image host
       is configured. The image host is not called: every probe would spend
       upload quota.

Status levels:
    - healthy:   database reachable, image host configured
    - degraded:  database reachable, image host API key missing
    - unhealthy: database unreachable
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from app import __version__
from app.config import settings
from app.database import engine
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health status of the backend service and its dependencies.",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    image_host_status = "configured" if settings.image_host_api_key else "not_configured"
    overall = "healthy" if settings.image_host_api_key else "degraded"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        image_host=image_host_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
