"""
TravelMemory Backend — Hello & Health Check Routes
===================================================

What:  GET /hello, a static liveness probe, and GET /health, which adds the
       database connector status and uptime.
How:   Neither route touches the database. /health reads the connector's
       last known status, so both stay fast and answer 200 while MongoDB is
       down.

Status levels (/health):
    - healthy:   connector reports `connected`
    - degraded:  connector is still `connecting` or reports `error`
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from travel_memory import __version__
from travel_memory.database import ConnectionStatus
from travel_memory.schemas.responses import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/hello",
    response_class=PlainTextResponse,
    summary="Static hello check",
)
async def hello() -> str:
    return "Hello World!"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """
    Report service status without issuing a database round trip.

    The connector's status is kept current by the driver's heartbeat monitor,
    so reading it is enough.
    """
    status = request.app.state.connector.status
    overall = "healthy" if status is ConnectionStatus.CONNECTED else "degraded"
    if overall != "healthy":
        logger.debug("Health check: database %s", status.value)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=status.value,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
