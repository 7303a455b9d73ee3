"""
TravelMemory Backend — Shared Response Schemas
===============================================

What:  Error and health payloads shared by every route.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "trip with ID '64b7...' was not found",
            "details": {"resource": "trip", "resource_id": "64b7..."},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health. Always 200; `database` reports the connector status."""
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    database: str = Field(description="Connector status: connecting, connected, error")
    uptime_seconds: float = Field(description="Seconds since service started")
