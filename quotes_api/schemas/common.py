"""Common schemas used across the API."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "success": false, "error": { "code", "message", "detail" }, "timestamp" }
    """

    success: Literal[False] = False
    error: ErrorDetail
    timestamp: datetime


class HealthResponse(BaseModel):
    """Response payload for GET /health."""

    status: Literal["healthy"] = "healthy"
    timestamp: datetime
    uptime: float = Field(ge=0, description="Seconds since the app started")
    environment: str
