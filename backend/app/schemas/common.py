"""
CuriousDog Backend — Shared Pydantic Schemas
==============================================

What:  Response models used across resources (errors, health) and small
       helpers shared by the resource schemas.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes.

    SQLite drops the offset of TIMESTAMP WITH TIME ZONE columns; everything
    is written in UTC, so a naive value read back is UTC.
    """
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "conflict",
            "message": "Question 12 has already been answered",
            "details": {"question_id": 12},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Picture storage: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
