"""
TravelMemory Backend — Request ID Middleware
=============================================

What:  Assigns a correlation id to each incoming request and echoes it back.
How:   A client-supplied X-Request-ID is kept when it is a short token of
       safe characters; anything else (missing, too long, containing spaces
       or control characters) is replaced by a fresh 8-character id, so the
       value can be written into log lines as-is. The id lives in a
       ContextVar for loggers and exception handlers, and in request.state
       for route handlers.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Coroutine-local: concurrent requests on the same loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(header_value: str) -> str:
    """The client's id if it is safe to log, else a new one."""
    if header_value and _SAFE_REQUEST_ID.match(header_value):
        return header_value
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Adds X-Request-ID to every routed response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER, ""))
        # Not reset afterwards: the unexpected-error handler runs outside this
        # middleware and still reads it
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
