"""
Book Review Service — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks both external dependencies and returns an aggregate status.

Status levels:
    - healthy:   database and auth provider reachable
    - degraded:  auth provider unreachable (catalog reads still work for
                 requests that were already authorized upstream)
    - unhealthy: database unreachable
"""

import logging
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text

from bookreview import __version__
from bookreview.schemas.common import HealthResponse
from bookreview.services.auth_service import AuthService
from bookreview.services.session import get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(auth: AuthService = Depends(get_auth_service)) -> HealthResponse:
    """Runs SELECT 1 against the database and probes the auth provider."""
    db_status = "connected"
    auth_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        from bookreview.database import engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Auth Provider ───────────────────────────────────────────────
    if not await auth.health_check():
        auth_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        auth=auth_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
