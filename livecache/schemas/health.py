"""Health check API schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")
    cache: Literal["available", "unavailable", "disabled"] = Field(
        ..., description="Cache store availability (the service stays up without it)"
    )
