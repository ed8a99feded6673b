"""Request dependencies (composition root).

Services are built once in the lifespan and stored on app.state; these
helpers hand them to endpoints.
"""

from fastapi import Request

from membership_api.application.services import EnvironmentResolver, MembershipAggregator


def get_aggregator(request: Request) -> MembershipAggregator:
    """Aggregator built at startup."""
    return request.app.state.aggregator


def get_environment_resolver(request: Request) -> EnvironmentResolver:
    """Environment resolver built at startup."""
    return request.app.state.environment_resolver
