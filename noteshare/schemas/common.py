"""
NoteShare Backend — Shared Response Schemas
=============================================

What:  Error envelope and health check payloads shared by every router.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Please choose a file to upload",
            "details": {"field": "file"},
            "request_id": "1f0c2a9b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Service and dependency status returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Blob storage: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
