"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health/status probe."""

    success: bool = True
    status: Literal["online"] = Field(default="online", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    active_sessions: int = Field(..., ge=0, description="Sessions held in this process")
    admin: Literal["created", "exists", "failed"] = Field(
        description="Result of the opportunistic admin bootstrap"
    )
