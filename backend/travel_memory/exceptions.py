"""
TravelMemory Backend — Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for the storage connector, the HTTP
       listener and the trip routes.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) turn the request-time
       ones into structured JSON error responses.

Exception Hierarchy:
    TravelMemoryError (base)
    ├── ValidationError          → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error
    ├── StorageConnectError      → startup only, logged and swallowed
    └── ServiceBindError         → startup only, fatal
"""

from typing import Any, Dict, Optional


class TravelMemoryError(Exception):
    """
    Base exception for all TravelMemory application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TravelMemoryError):
    """
    Raised when client input fails validation.

    When:    Malformed trip id, empty update body.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(TravelMemoryError):
    """
    Raised when a requested resource does not exist.

    When:    GET /trip/{id} with an id that has no document.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(TravelMemoryError):
    """
    Raised when a database operation fails at the point of use.

    When:    Server unreachable, connection dropped mid-query, write rejected.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the driver error is
    kept in `context` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageConnectError(TravelMemoryError):
    """
    Raised when the connection attempt to MongoDB fails.

    Recovery: The connector hands it to its error subscribers instead of
    raising it; the HTTP service keeps running without a working backend.
    """

    def __init__(
        self,
        uri: str,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        detail = str(cause) if cause is not None else "unknown error"
        ctx = context or {}
        ctx["uri"] = uri
        if cause is not None:
            ctx["error_type"] = type(cause).__name__
        super().__init__(message=detail, context=ctx)
        self.uri = uri
        self.cause = cause


class ServiceBindError(TravelMemoryError):
    """
    Raised when the HTTP listener cannot bind the configured address.

    Recovery: None. It propagates out of the entry point and the process
    exits with a non-zero status.
    """

    def __init__(
        self,
        host: str,
        port: int,
        cause: Optional[BaseException] = None,
    ):
        message = f"Could not bind HTTP listener to {host}:{port}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message=message, context={"host": host, "port": port})
        self.host = host
        self.port = port
