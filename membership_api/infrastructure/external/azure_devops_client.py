"""Azure DevOps identity client (projects, scoped groups, group members).

Stateless: one instance per call, built around ConnectionParams and an
optional shared httpx.AsyncClient (connection reuse is whatever the shared
transport provides). Non-2xx responses and transport failures become
UpstreamException; nothing is retried.
"""

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx

from membership_api.core.constants import IDENTITY_API_VERSION, PROJECTS_API_VERSION
from membership_api.domain.exceptions import UpstreamException
from membership_api.domain.value_objects import ConnectionParams
from membership_api.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Upstream error bodies can be full HTML pages; keep enough to diagnose.
_MAX_ERROR_BODY_CHARS = 2000


class AzureDevOpsClient:
    """Authenticated calls against one Azure DevOps environment."""

    def __init__(
        self,
        params: ConnectionParams,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._params = params
        self._shared_http = http_client
        self._timeout = timeout
        self._headers = {
            "Authorization": params.basic_auth_header(),
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @asynccontextmanager
    async def _http_cm(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield shared HTTP client or a short-lived one."""
        if self._shared_http is not None:
            yield self._shared_http
            return
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            yield client

    def _url(self, path: str) -> str:
        return f"{self._params.organization_url}/{path.lstrip('/')}"

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request; raise UpstreamException on transport error or non-2xx."""
        url = self._url(path)
        logger.debug("Upstream %s: %s %s", operation, method, url)
        try:
            async with self._http_cm() as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=self._headers,
                )
        except httpx.HTTPError as e:
            raise UpstreamException(operation, reason=str(e) or e.__class__.__name__) from e
        if not response.is_success:
            raise UpstreamException(
                operation,
                status=response.status_code,
                body=response.text[:_MAX_ERROR_BODY_CHARS],
            )
        return response

    @staticmethod
    def _json_list(operation: str, response: httpx.Response, field: str) -> list[dict[str, Any]]:
        """Extract a list field from a JSON response body."""
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamException(
                operation,
                status=response.status_code,
                body=response.text[:_MAX_ERROR_BODY_CHARS],
                reason="response is not JSON",
            ) from e
        items = data.get(field) if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise UpstreamException(
                operation,
                status=response.status_code,
                reason=f"response has no {field!r} list",
            )
        return items

    async def list_projects(self) -> list[dict[str, Any]]:
        """Return raw project objects ({id, name, ...}) of the organization."""
        response = await self._request(
            "list_projects",
            "GET",
            "_apis/projects",
            params={"api-version": PROJECTS_API_VERSION},
        )
        return self._json_list("list_projects", response, "value")

    async def list_groups(self, project_id: str) -> list[dict[str, Any]]:
        """Return raw scoped application groups of a project."""
        response = await self._request(
            "list_groups",
            "GET",
            f"{project_id}/_api/_identity/ReadScopedApplicationGroupsJson",
            params={"__v": IDENTITY_API_VERSION},
        )
        return self._json_list("list_groups", response, "identities")

    async def list_group_members(self, project_id: str, group_id: str) -> list[dict[str, Any]]:
        """Return raw member identities of one group."""
        response = await self._request(
            "list_group_members",
            "GET",
            f"{project_id}/_api/_identity/ReadGroupMembers",
            params={
                "__v": IDENTITY_API_VERSION,
                "scope": group_id,
                "readMembers": "true",
            },
        )
        return self._json_list("list_group_members", response, "identities")

    async def remove_member(self, project_id: str, group_id: str, member_id: str) -> None:
        """Remove exactly member_id from exactly group_id. Raises UpstreamException on failure."""
        await self._request(
            "remove_member",
            "POST",
            f"{project_id}/_api/_identity/EditMembership",
            params={"__v": IDENTITY_API_VERSION},
            json_body={
                "editMembers": "true",
                "groupId": group_id,
                "removeItemsJson": json.dumps([member_id]),
            },
        )
        logger.info("Removed member %s from group %s (project %s)", member_id, group_id, project_id)
