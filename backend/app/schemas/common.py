"""
Selah Backend — Shared Pydantic Schema Building Blocks
=======================================================

What:  Base model and envelope schemas reused by every API module.
How:   `CamelModel` gives snake_case Python attributes camelCase JSON names
       (`verse_id` ↔ `verseId`). Request bodies accept either spelling;
       responses are always serialized with the camelCase aliases
       (FastAPI's `response_model_by_alias` defaults to True).
Who:   Subclassed by the bible, hymn, livestream and library schema modules.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every request/response body: camelCase on the wire, ORM-readable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelModel):
    """
    Returned by every delete endpoint.

    Deletes are scoped to the caller, so `success` is true whether or not a
    row was actually removed; "not found" and "not yours" look identical.
    """

    success: bool = Field(default=True)


class ErrorResponse(BaseModel):
    """
    Standardized error body produced by the global exception handlers.

    Example:
        {
            "error": "not_found",
            "message": "livestream with ID '42' was not found",
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer probes.

    `gemini` is reported as "not_configured" when no API key is set; the
    service is still "healthy" in that case because the annotator is optional.
    """

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gemini: str = Field(
        description="Gemini API status: available, unavailable, circuit_open, not_configured"
    )
    uptime_seconds: float = Field(description="Seconds since service started")
