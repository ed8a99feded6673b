"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring: logging, Redis cache, the shared
upstream HTTP transport, and the resolver/store/aggregator graph stored on
app.state. No business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from membership_api.application.services import (
    CacheAsideStore,
    EnvironmentResolver,
    MembershipAggregator,
)
from membership_api.core.config import Settings, build_environment_registry, get_settings
from membership_api.domain.value_objects import ConnectionParams
from membership_api.infrastructure.cache.cache_protocol import CacheProtocol
from membership_api.infrastructure.external import AzureDevOpsClient
from membership_api.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


def build_aggregator(
    settings: Settings,
    cache: CacheProtocol | None,
    http_client: httpx.AsyncClient | None,
) -> MembershipAggregator:
    """Wire resolver, cache-aside store and per-call client factory."""
    resolver = EnvironmentResolver(build_environment_registry(settings))

    def client_factory(params: ConnectionParams) -> AzureDevOpsClient:
        return AzureDevOpsClient(
            params,
            http_client=http_client,
            timeout=settings.upstream_timeout_seconds,
        )

    return MembershipAggregator(
        resolver,
        CacheAsideStore(cache),
        client_factory,
        ttl_seconds=settings.cache_ttl_seconds,
        concurrency=settings.fanout_concurrency,
    )


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, shared HTTP client, Redis cache (if enabled),
    aggregator. Shutdown order: HTTP client close, cache disconnect.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    app.state.http_client = httpx.AsyncClient(timeout=settings.upstream_timeout_seconds)

    if settings.redis_enabled:
        from membership_api.infrastructure.cache.redis_cache import CacheService

        cache = CacheService(settings=settings)
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None

    aggregator = build_aggregator(settings, app.state.cache, app.state.http_client)
    app.state.aggregator = aggregator
    app.state.environment_resolver = aggregator.resolver
    configured = [environment.value for environment in aggregator.resolver.configured()]
    if not configured:
        logger.warning("No upstream environment is configured; every request will fail")
    else:
        logger.info("Configured environments: %s", ", ".join(configured))

    yield

    # ---- Shutdown ----
    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("Upstream HTTP client closed")

    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        logger.info("Cache disconnected")
