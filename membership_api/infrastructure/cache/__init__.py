"""Cache: Redis service and cache key utilities.

Used by the cache-aside store for projects, groups and members. Key format
is in keys.py.
"""

from membership_api.infrastructure.cache.cache_protocol import CacheProtocol
from membership_api.infrastructure.cache.keys import groups_key, members_key, projects_key
from membership_api.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheProtocol",
    "CacheService",
    "groups_key",
    "members_key",
    "projects_key",
]
