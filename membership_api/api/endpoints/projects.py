"""Projects API: raw project list of an environment."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from membership_api.api.dependencies import get_aggregator
from membership_api.application.services import MembershipAggregator
from membership_api.schemas.membership import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/projects",
    response_model=list[dict[str, Any]],
    responses={500: {"model": ErrorResponse}},
)
async def list_projects(
    aggregator: Annotated[MembershipAggregator, Depends(get_aggregator)],
    environment: Annotated[str | None, Query(description="server or services")] = None,
) -> list[dict[str, Any]]:
    """Return projects as the upstream lists them ({id, name, ...})."""
    logger.info("GET /api/projects environment=%s", environment)
    return await aggregator.list_projects(environment)
