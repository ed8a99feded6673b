"""Cache key builders. Single place for key format.

Key components (environment, project_id, group_id) must not contain
CACHE_KEY_SEP to avoid ambiguous or colliding keys across environments
and projects.
"""

from membership_api.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_GROUPS,
    CACHE_PREFIX_MEMBERS,
    CACHE_PREFIX_PROJECTS,
)
from membership_api.domain.exceptions import InvalidIdentifierException


def _validate_key_component(value: str, name: str) -> None:
    """Raise InvalidIdentifierException if value is empty or contains the separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message and details).

    Raises:
        InvalidIdentifierException: If value is empty or contains CACHE_KEY_SEP.
    """
    if not value:
        raise InvalidIdentifierException(name, value, "must not be empty")
    if CACHE_KEY_SEP in value:
        raise InvalidIdentifierException(
            name, value, f"must not contain separator {CACHE_KEY_SEP!r}"
        )


def _validate_key_components(components: list[tuple[str, str]]) -> None:
    """Validate multiple key components; raise on first invalid one."""
    for value, name in components:
        _validate_key_component(value, name)


def projects_key(environment: str) -> str:
    """Cache key for the project list of an environment."""
    _validate_key_component(environment, "environment")
    return f"{CACHE_PREFIX_PROJECTS}{CACHE_KEY_SEP}{environment}"


def groups_key(environment: str, project_id: str) -> str:
    """Cache key for the groups of one project."""
    _validate_key_components([(environment, "environment"), (project_id, "project_id")])
    return f"{CACHE_PREFIX_GROUPS}{CACHE_KEY_SEP}{environment}{CACHE_KEY_SEP}{project_id}"


def members_key(environment: str, project_id: str, group_id: str) -> str:
    """Cache key for the members of one group within one project."""
    _validate_key_components(
        [(environment, "environment"), (project_id, "project_id"), (group_id, "group_id")]
    )
    return (
        f"{CACHE_PREFIX_MEMBERS}{CACHE_KEY_SEP}{environment}{CACHE_KEY_SEP}"
        f"{project_id}{CACHE_KEY_SEP}{group_id}"
    )
