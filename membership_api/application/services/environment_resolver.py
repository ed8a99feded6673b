"""Environment resolver: environment tag -> connection parameters.

Pure lookup over the registry built once at startup; no I/O, no caching.
"""

from __future__ import annotations

from typing import Mapping

from membership_api.domain.enums import Environment
from membership_api.domain.exceptions import InvalidEnvironmentException
from membership_api.domain.value_objects import ConnectionParams


class EnvironmentResolver:
    """Resolve environment tags against an immutable registry."""

    def __init__(self, registry: Mapping[Environment, ConnectionParams]) -> None:
        self._registry = registry

    @staticmethod
    def parse(tag: str | Environment | None) -> Environment:
        """Return the Environment for tag. Raises InvalidEnvironmentException for anything else."""
        if isinstance(tag, Environment):
            return tag
        try:
            return Environment(tag)
        except ValueError:
            raise InvalidEnvironmentException(
                tag, f"expected one of {', '.join(Environment.values())}"
            ) from None

    def resolve(self, tag: str | Environment | None) -> ConnectionParams:
        """Return connection parameters for tag.

        Raises:
            InvalidEnvironmentException: tag is outside the enumerated set, or
                is a known environment without configured credentials.
        """
        environment = self.parse(tag)
        params = self._registry.get(environment)
        if params is None:
            raise InvalidEnvironmentException(environment.value, "environment is not configured")
        return params

    def configured(self) -> list[Environment]:
        """Environments with connection parameters, in declaration order."""
        return [environment for environment in Environment if environment in self._registry]
