"""Application services: environment resolution, cache-aside and aggregation."""

from membership_api.application.services.aggregator import MembershipAggregator
from membership_api.application.services.cache_aside import CacheAsideStore
from membership_api.application.services.environment_resolver import EnvironmentResolver

__all__ = ["CacheAsideStore", "EnvironmentResolver", "MembershipAggregator"]
