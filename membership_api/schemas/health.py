"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /api/health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /api/health/ready.

    The service is ready with a degraded cache; cache reports whether reads
    are currently served from Redis.
    """

    status: str = Field(default="ok", description="Readiness status")
    cache: str = Field(..., description="connected, disconnected or disabled")
    environments: list[str] = Field(
        default_factory=list, description="Configured upstream environments"
    )
