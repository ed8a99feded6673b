"""Unit tests for AzureDevOpsClient against httpx.MockTransport."""

import base64
import json

import httpx
import pytest

from membership_api.domain.exceptions import UpstreamException
from membership_api.infrastructure.external import AzureDevOpsClient
from tests.fakes import FakeAzureDevOps


@pytest.fixture
def ado_client(connection_params, http_client) -> AzureDevOpsClient:
    return AzureDevOpsClient(connection_params, http_client=http_client)


async def test_list_projects_sends_basic_auth_with_empty_user(
    ado_client: AzureDevOpsClient, upstream: FakeAzureDevOps
) -> None:
    projects = await ado_client.list_projects()
    assert projects[0]["id"] == "P1"
    request = upstream.requests[-1]
    assert request.url.path == "/tfs/Fabrikam/_apis/projects"
    assert request.url.params["api-version"] == "6.0"
    scheme, encoded = request.headers["Authorization"].split(" ")
    assert scheme == "Basic"
    assert base64.b64decode(encoded).decode() == ":pat-server"


async def test_list_groups_and_members(ado_client: AzureDevOpsClient, upstream: FakeAzureDevOps) -> None:
    groups = await ado_client.list_groups("P1")
    assert groups == [{"TeamFoundationId": "G1", "FriendlyDisplayName": "Readers"}]
    members = await ado_client.list_group_members("P1", "G1")
    assert members == [{"TeamFoundationId": "M1", "DisplayName": "Alice"}]
    request = upstream.requests[-1]
    assert request.url.path == "/tfs/Fabrikam/P1/_api/_identity/ReadGroupMembers"
    assert request.url.params["scope"] == "G1"
    assert request.url.params["readMembers"] == "true"


async def test_non_2xx_raises_upstream_exception_with_status_and_body(
    ado_client: AzureDevOpsClient, upstream: FakeAzureDevOps
) -> None:
    upstream.failures[("list_groups", "P1")] = 401
    with pytest.raises(UpstreamException) as exc_info:
        await ado_client.list_groups("P1")
    assert exc_info.value.status == 401
    assert exc_info.value.body == "list_groups failed"
    assert exc_info.value.details["operation"] == "list_groups"


async def test_remove_member_posts_edit_membership(
    ado_client: AzureDevOpsClient, upstream: FakeAzureDevOps
) -> None:
    await ado_client.remove_member("P1", "G1", "M1")
    request = upstream.requests[-1]
    assert request.method == "POST"
    assert request.url.path == "/tfs/Fabrikam/P1/_api/_identity/EditMembership"
    body = json.loads(request.content)
    assert body == {"editMembers": "true", "groupId": "G1", "removeItemsJson": '["M1"]'}
    assert upstream.members[("P1", "G1")] == []


async def test_remove_member_failure_is_not_retried(
    ado_client: AzureDevOpsClient, upstream: FakeAzureDevOps
) -> None:
    upstream.failures[("remove_member", "P1", "G1", "M1")] = 403
    with pytest.raises(UpstreamException) as exc_info:
        await ado_client.remove_member("P1", "G1", "M1")
    assert exc_info.value.status == 403
    assert upstream.calls[("remove_member", "P1", "G1", "M1")] == 1


async def test_transport_error_has_no_status(connection_params) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http:
        client = AzureDevOpsClient(connection_params, http_client=http)
        with pytest.raises(UpstreamException) as exc_info:
            await client.list_projects()
    assert exc_info.value.status is None
    assert "connection refused" in exc_info.value.details["reason"]


async def test_response_without_expected_field_raises(connection_params) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"count": 0}))
    async with httpx.AsyncClient(transport=transport) as http:
        client = AzureDevOpsClient(connection_params, http_client=http)
        with pytest.raises(UpstreamException):
            await client.list_projects()
