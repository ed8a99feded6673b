"""Value objects: immutable connection parameters for one environment."""

import base64
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ConnectionParams:
    """Connection parameters for one upstream environment.

    The token is excluded from repr so it never ends up in logs.
    """

    organization: str
    base_url: str
    personal_access_token: str = field(repr=False)

    @property
    def organization_url(self) -> str:
        """Base URL joined with the organization (collection) segment."""
        return f"{self.base_url}/{self.organization}"

    def basic_auth_header(self) -> str:
        """Authorization header value: Basic base64(":" + token)."""
        raw = f":{self.personal_access_token}".encode("utf-8")
        return f"Basic {base64.b64encode(raw).decode('ascii')}"
