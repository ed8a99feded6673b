"""Membership API: remove one member from one group."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from membership_api.api.dependencies import get_aggregator
from membership_api.application.services import MembershipAggregator
from membership_api.domain.exceptions import MemberRemovalException, UpstreamException
from membership_api.schemas.membership import (
    ErrorResponse,
    RemoveMemberRequest,
    RemoveMemberResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/remove-member",
    response_model=RemoveMemberResponse,
    responses={500: {"model": ErrorResponse}},
)
async def remove_member(
    body: RemoveMemberRequest,
    aggregator: Annotated[MembershipAggregator, Depends(get_aggregator)],
) -> RemoveMemberResponse:
    """Remove a member upstream and drop the cached member list of that group.

    An upstream error status is returned as-is; the cache is left untouched.
    """
    logger.info(
        "POST /api/remove-member project=%s group=%s member=%s",
        body.project_id,
        body.group_id,
        body.member_id,
    )
    try:
        invalidated = await aggregator.remove_member(
            body.environment, body.project_id, body.group_id, body.member_id
        )
    except UpstreamException as e:
        raise MemberRemovalException(e) from e
    if not invalidated:
        return RemoveMemberResponse(
            message="Member removed; cached member list could not be cleared and expires with its TTL"
        )
    return RemoveMemberResponse(message="Member removed and cache cleared")
