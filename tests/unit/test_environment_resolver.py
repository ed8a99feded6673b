"""Unit tests for EnvironmentResolver."""

import pytest

from membership_api.application.services import EnvironmentResolver
from membership_api.domain.enums import Environment
from membership_api.domain.exceptions import InvalidEnvironmentException
from membership_api.domain.value_objects import ConnectionParams


def test_resolve_known_tag_returns_params(resolver, connection_params) -> None:
    """'server' resolves to the registered parameters."""
    assert resolver.resolve("server") == connection_params


def test_resolve_is_deterministic(resolver) -> None:
    """Repeated resolution returns equal parameters."""
    assert resolver.resolve("server") == resolver.resolve(Environment.SERVER)


@pytest.mark.parametrize("tag", ["", "prod", "SERVER", "server ", None])
def test_resolve_unknown_tag_raises(resolver, tag) -> None:
    """Tags outside the enumerated set are never defaulted."""
    with pytest.raises(InvalidEnvironmentException) as exc_info:
        resolver.resolve(tag)
    assert exc_info.value.error_code == "INVALID_ENVIRONMENT"
    assert exc_info.value.details["environment"] == tag


def test_resolve_known_but_unconfigured_raises(resolver) -> None:
    """'services' is a valid tag but has no parameters in this registry."""
    with pytest.raises(InvalidEnvironmentException) as exc_info:
        resolver.resolve("services")
    assert exc_info.value.details["reason"] == "environment is not configured"


def test_configured_lists_registered_environments() -> None:
    params = ConnectionParams(organization="o", base_url="https://x", personal_access_token="t")
    resolver = EnvironmentResolver({Environment.SERVICES: params})
    assert resolver.configured() == [Environment.SERVICES]


def test_basic_auth_header_uses_empty_username() -> None:
    """Header is Basic base64(':' + token)."""
    params = ConnectionParams(organization="o", base_url="https://x", personal_access_token="abc")
    assert params.basic_auth_header() == "Basic OmFiYw=="
    assert "abc" not in repr(params)
