"""API tests for POST /api/remove-member."""

from unittest.mock import AsyncMock

from httpx import AsyncClient

from tests.fakes import FakeAzureDevOps, FakeRedis, connection_error

BODY = {"environment": "server", "projectId": "P1", "groupId": "G1", "memberId": "M1"}


async def test_remove_member_clears_group_cache(
    client: AsyncClient, upstream: FakeAzureDevOps, fake_redis: FakeRedis
) -> None:
    await client.get("/api/data/P1", params={"environment": "server"})
    assert "members:server:P1:G1" in fake_redis.data

    response = await client.post("/api/remove-member", json=BODY)

    assert response.status_code == 200
    assert response.json() == {"message": "Member removed and cache cleared"}
    assert "members:server:P1:G1" not in fake_redis.data
    follow_up = await client.get("/api/data/P1", params={"environment": "server"})
    assert follow_up.json() == []


async def test_remove_member_surfaces_upstream_status(
    client: AsyncClient, upstream: FakeAzureDevOps, fake_redis: FakeRedis
) -> None:
    await client.get("/api/data/P1", params={"environment": "server"})
    upstream.failures[("remove_member", "P1", "G1", "M1")] = 403

    response = await client.post("/api/remove-member", json=BODY)

    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "Failed to remove member"
    assert body["details"]["status"] == 403
    assert "members:server:P1:G1" in fake_redis.data


async def test_remove_member_invalid_environment_is_500(client: AsyncClient) -> None:
    response = await client.post("/api/remove-member", json={**BODY, "environment": "nope"})
    assert response.status_code == 500
    assert response.json()["details"]["environment"] == "nope"


async def test_remove_member_missing_field_is_422(client: AsyncClient) -> None:
    response = await client.post(
        "/api/remove-member", json={"environment": "server", "projectId": "P1"}
    )
    assert response.status_code == 422


async def test_remove_member_separator_in_id_is_400_without_upstream_call(
    client: AsyncClient, upstream: FakeAzureDevOps
) -> None:
    response = await client.post("/api/remove-member", json={**BODY, "projectId": "P:1"})
    assert response.status_code == 400
    body = response.json()
    assert body["details"]["project_id"] == "P:1"
    assert "separator" in body["details"]["reason"]
    assert not any(key[0] == "remove_member" for key in upstream.calls)


async def test_remove_member_with_cache_down_still_succeeds(
    client: AsyncClient, upstream: FakeAzureDevOps, fake_redis: FakeRedis, cache
) -> None:
    await client.get("/api/data/P1", params={"environment": "server"})
    cache._reconnect = AsyncMock(return_value=False)
    fake_redis.fail_with = connection_error()

    response = await client.post("/api/remove-member", json=BODY)

    assert response.status_code == 200
    assert "expires with its TTL" in response.json()["message"]
    assert upstream.members[("P1", "G1")] == []


async def test_remove_member_missing_environment_is_500(
    client: AsyncClient, upstream: FakeAzureDevOps
) -> None:
    body = {k: v for k, v in BODY.items() if k != "environment"}
    response = await client.post("/api/remove-member", json=body)
    assert response.status_code == 500
    assert response.json()["details"]["environment"] is None
    assert not any(key[0] == "remove_member" for key in upstream.calls)
