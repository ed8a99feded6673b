"""Core constants: cache key prefixes and upstream API literals.

Single source of truth for cache key structure. Used by
infrastructure.cache.keys and the cache-aside store.
"""

# Cache key prefixes (used as projects:{env}, groups:{env}:{project}, ...)
CACHE_PREFIX_PROJECTS = "projects"
CACHE_PREFIX_GROUPS = "groups"
CACHE_PREFIX_MEMBERS = "members"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# One hour; entries are refreshed by fetch-and-overwrite after expiry.
DEFAULT_CACHE_TTL_SECONDS = 3600

# Upstream (Azure DevOps) API versions
PROJECTS_API_VERSION = "6.0"
IDENTITY_API_VERSION = "5"
