"""
AEDCheck Backend — Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   Every API call needs the database, so a DB that cannot answer
       SELECT 1 means the instance should stop receiving traffic.
How:   Pings the database and reports status, version and uptime.
Who:   Docker health checks, load balancers, monitoring.

Status levels:
    healthy:   database reachable (HTTP 200)
    unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy.exc import SQLAlchemyError

from aedcheck import __version__
from aedcheck.database import ping_database
from aedcheck.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns service status and database connectivity. Unauthenticated.",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        await ping_database()
    except (OSError, SQLAlchemyError, TimeoutError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
