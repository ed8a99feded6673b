"""Records API: flattened project/group/member rows.

Branch failures returned by the aggregator are logged here; they never
reach the response body.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from membership_api.api.dependencies import get_aggregator
from membership_api.application.dtos import AggregationResult
from membership_api.application.services import MembershipAggregator
from membership_api.schemas.membership import ErrorResponse, FlatRecordResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _log_and_serialize(route: str, result: AggregationResult) -> list[FlatRecordResponse]:
    for failure in result.failures:
        if failure.level == "groups":
            logger.warning(
                "%s: groups of project %s (%s) could not be fetched: %s",
                route,
                failure.project_name,
                failure.project_id,
                failure.error,
            )
        else:
            logger.warning(
                "%s: members of group %s (%s) in project %s could not be fetched: %s",
                route,
                failure.group_name,
                failure.group_id,
                failure.project_name,
                failure.error,
            )
    logger.info(
        "%s: %d records, %d failed branches", route, len(result.records), len(result.failures)
    )
    return [FlatRecordResponse.from_record(record) for record in result.records]


@router.get(
    "/data/{project_id}",
    response_model=list[FlatRecordResponse],
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def project_records(
    aggregator: Annotated[MembershipAggregator, Depends(get_aggregator)],
    project_id: str,
    environment: Annotated[str | None, Query(description="server or services")] = None,
) -> list[FlatRecordResponse]:
    """Return every (group, member) row of one project."""
    logger.info("GET /api/data/%s environment=%s", project_id, environment)
    result = await aggregator.project_records(environment, project_id)
    return _log_and_serialize(f"/api/data/{project_id}", result)


@router.get(
    "/all-members",
    response_model=list[FlatRecordResponse],
    responses={500: {"model": ErrorResponse}},
)
async def all_records(
    aggregator: Annotated[MembershipAggregator, Depends(get_aggregator)],
    environment: Annotated[str | None, Query(description="server or services")] = None,
) -> list[FlatRecordResponse]:
    """Return every (project, group, member) row of the organization."""
    logger.info("GET /api/all-members environment=%s", environment)
    result = await aggregator.all_records(environment)
    return _log_and_serialize("/api/all-members", result)
