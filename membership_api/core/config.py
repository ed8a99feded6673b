"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Per-environment connection parameters are turned into an
immutable registry once at startup (see build_environment_registry).
"""

from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from membership_api.core.constants import DEFAULT_CACHE_TTL_SECONDS
from membership_api.domain.enums import Environment
from membership_api.domain.value_objects import ConnectionParams


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Each upstream environment (server, services) needs organization, URL and
    personal access token. An environment with any of the three missing is
    left out of the registry and requests for it fail as invalid.
    """

    # App
    app_name: str = "membership-api"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS (the UI is served from another origin)
    allowed_origins: str = "http://localhost:3000"

    # Azure DevOps Server (on-premises)
    azdevops_org_server: str = ""
    azdevops_url_server: str = ""
    azdevops_pat_server: SecretStr = SecretStr("")

    # Azure DevOps Services (cloud)
    azdevops_org_services: str = ""
    azdevops_url_services: str = "https://dev.azure.com"
    azdevops_pat_services: SecretStr = SecretStr("")

    # Upstream HTTP: None means no client-side timeout (transport default off).
    upstream_timeout_seconds: float | None = None
    # 1 keeps the sequential fan-out; >1 bounds concurrent group/member fetches.
    fanout_concurrency: int = 1

    # Redis Cache
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS

    # Request / middleware
    request_id_header: str = "X-Request-ID"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("fanout_concurrency")
    @classmethod
    def validate_fanout_concurrency(cls, value: int) -> int:
        """Concurrency below 1 would never schedule a fetch."""
        if value < 1:
            raise ValueError(f"fanout_concurrency must be >= 1, got: {value}")
        return value

    @field_validator("cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, value: int) -> int:
        """Redis SETEX rejects non-positive expiry."""
        if value < 1:
            raise ValueError(f"cache_ttl_seconds must be >= 1, got: {value}")
        return value


def build_environment_registry(settings: Settings) -> Mapping[Environment, ConnectionParams]:
    """Return a read-only Environment -> ConnectionParams mapping.

    Only fully configured environments are included. Called once at startup;
    the result is handed to EnvironmentResolver.
    """
    raw = {
        Environment.SERVER: (
            settings.azdevops_org_server,
            settings.azdevops_url_server,
            settings.azdevops_pat_server.get_secret_value(),
        ),
        Environment.SERVICES: (
            settings.azdevops_org_services,
            settings.azdevops_url_services,
            settings.azdevops_pat_services.get_secret_value(),
        ),
    }
    registry: dict[Environment, ConnectionParams] = {}
    for environment, (organization, base_url, token) in raw.items():
        if organization and base_url and token:
            registry[environment] = ConnectionParams(
                organization=organization,
                base_url=base_url.rstrip("/"),
                personal_access_token=token,
            )
    return MappingProxyType(registry)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
