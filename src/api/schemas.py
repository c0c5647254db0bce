"""Pydantic schemas for proxy request/response models."""

from typing import Any

from pydantic import BaseModel, Field


class PingResponse(BaseModel):
    """Wake-up ping response."""

    status: str = Field(..., description="Always 'awake'")


class ErrorResponse(BaseModel):
    """Error body rendered for domain errors."""

    error: str
    error_code: str
    details: Any | None = None
    status: int | None = Field(None, description="Upstream HTTP status, when relayed")
    raw: str | None = Field(None, description="Raw upstream body, when not JSON")


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str
    version: str
    uptime_seconds: int
