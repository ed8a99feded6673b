"""Pytest configuration and fixtures.

Environment variables are set before membership_api is imported so
get_settings() sees a configured server environment and no Redis. HTTP tests
build the app with create_app() and wire app.state by hand (ASGITransport
does not run the lifespan).
"""

import os

os.environ.setdefault("AZDEVOPS_ORG_SERVER", "Fabrikam")
os.environ.setdefault("AZDEVOPS_URL_SERVER", "https://devops.example.test/tfs")
os.environ.setdefault("AZDEVOPS_PAT_SERVER", "pat-server")
os.environ.setdefault("REDIS_ENABLED", "false")

import pytest
from httpx import ASGITransport, AsyncClient

from membership_api.application.services import (
    CacheAsideStore,
    EnvironmentResolver,
    MembershipAggregator,
)
from membership_api.core.config import get_settings
from membership_api.domain.enums import Environment
from membership_api.domain.value_objects import ConnectionParams
from membership_api.infrastructure.cache.redis_cache import CacheService
from membership_api.infrastructure.external import AzureDevOpsClient
from membership_api.main import create_app
from tests.fakes import BASE_URL, ORG, TOKEN, FakeAzureDevOps, FakeRedis


@pytest.fixture
def connection_params() -> ConnectionParams:
    return ConnectionParams(organization=ORG, base_url=BASE_URL, personal_access_token=TOKEN)


@pytest.fixture
def resolver(connection_params: ConnectionParams) -> EnvironmentResolver:
    """Only the server environment is configured."""
    return EnvironmentResolver({Environment.SERVER: connection_params})


@pytest.fixture
def upstream() -> FakeAzureDevOps:
    """Upstream with one project P1 'Alpha', group G1 'Readers', member M1 'Alice'."""
    fake = FakeAzureDevOps()
    fake.add_project("P1", "Alpha")
    fake.add_group("P1", "G1", "Readers")
    fake.add_member("P1", "G1", "M1", "Alice")
    return fake


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> CacheService:
    return CacheService(redis_client=fake_redis, settings=get_settings())


@pytest.fixture
async def http_client(upstream: FakeAzureDevOps):
    async with upstream.client() as client:
        yield client


@pytest.fixture
def make_aggregator(resolver, cache, http_client):
    """Factory: aggregator over the fake upstream and fake Redis."""

    def _make(concurrency: int = 1) -> MembershipAggregator:
        return MembershipAggregator(
            resolver,
            CacheAsideStore(cache),
            lambda params: AzureDevOpsClient(params, http_client=http_client),
            ttl_seconds=3600,
            concurrency=concurrency,
        )

    return _make


@pytest.fixture
def aggregator(make_aggregator) -> MembershipAggregator:
    return make_aggregator()


@pytest.fixture
def app(aggregator: MembershipAggregator, cache: CacheService):
    application = create_app()
    application.state.aggregator = aggregator
    application.state.environment_resolver = aggregator.resolver
    application.state.cache = cache
    return application


@pytest.fixture
async def client(app) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
