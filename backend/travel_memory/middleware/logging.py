"""
TravelMemory Backend — Request Logging Middleware
==================================================

What:  One access log line per HTTP request.
How:   Measures the time spent in the downstream app and logs method, path,
       status, duration, request id and client address on the
       `travel_memory.access` logger. A request whose handler raised is
       logged as a 500 before the exception continues to the error handler.

Level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Scrape endpoints (/health, /metrics) are polled every few seconds and are
only logged when they fail.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from travel_memory.middleware.request_id import request_id_var

logger = logging.getLogger("travel_memory.access")

QUIET_PATHS = frozenset({"/health", "/metrics"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its status code and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
        finally:
            status = response.status_code if response is not None else 500
            if status >= 500 or request.url.path not in QUIET_PATHS:
                self._log(request, status, (time.perf_counter() - start_time) * 1000)
        return response

    @staticmethod
    def _log(request: Request, status: int, duration_ms: float) -> None:
        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
