"""Health check endpoints; used for liveness and readiness probes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from membership_api.api.dependencies import get_environment_resolver
from membership_api.application.services import EnvironmentResolver
from membership_api.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    request: Request,
    resolver: Annotated[EnvironmentResolver, Depends(get_environment_resolver)],
) -> ReadinessResponse:
    """Report cache connectivity and configured environments.

    Always 200: a disconnected cache only means every read goes upstream.
    """
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        cache_status = "disabled"
    elif await cache.ping():
        cache_status = "connected"
    else:
        cache_status = "disconnected"
    return ReadinessResponse(
        cache=cache_status,
        environments=[environment.value for environment in resolver.configured()],
    )
