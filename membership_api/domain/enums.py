"""Domain enumerations for the membership service.

Enums represent fixed sets of domain values (e.g. upstream environment).
"""

from enum import Enum


class Environment(str, Enum):
    """Upstream Azure DevOps deployment target.

    SERVER is the on-premises Azure DevOps Server, SERVICES the cloud
    offering. Each carries its own organization, URL and access token.
    """

    SERVER = "server"
    SERVICES = "services"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid environment tags as strings.

        Returns:
            List of enum value strings (e.g. for validation or error details).
        """
        return [environment.value for environment in cls]
