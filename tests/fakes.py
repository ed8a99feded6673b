"""Test doubles: in-memory async Redis and a fake Azure DevOps identity API."""

from __future__ import annotations

import json
from collections import Counter
from typing import Any
from urllib.parse import parse_qs

import httpx
import redis.asyncio as redis

ORG = "Fabrikam"
BASE_URL = "https://devops.example.test/tfs"
TOKEN = "pat-server"


class FakeRedis:
    """Minimal async Redis client: get/setex/delete/ping/aclose on an in-memory dict.

    Set fail_with to an exception instance to make every command raise it.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail_with: Exception | None = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def ping(self) -> bool:
        self._check()
        return True

    async def get(self, key: str) -> str | None:
        self._check()
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def aclose(self) -> None:
        return None


class FakeAzureDevOps:
    """Routes Azure DevOps identity endpoints to in-memory data.

    projects: raw project objects; groups: project_id -> raw groups;
    members: (project_id, group_id) -> raw members. failures maps a
    (operation, *ids) tuple to an HTTP status to return instead of data.
    """

    def __init__(self) -> None:
        self.projects: list[dict[str, Any]] = []
        self.groups: dict[str, list[dict[str, Any]]] = {}
        self.members: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.failures: dict[tuple[str, ...], int] = {}
        self.calls: Counter[tuple[str, ...]] = Counter()
        self.requests: list[httpx.Request] = []

    def add_project(self, project_id: str, name: str) -> None:
        self.projects.append({"id": project_id, "name": name, "state": "wellFormed"})
        self.groups.setdefault(project_id, [])

    def add_group(self, project_id: str, group_id: str, name: str) -> None:
        self.groups.setdefault(project_id, []).append(
            {"TeamFoundationId": group_id, "FriendlyDisplayName": name}
        )
        self.members.setdefault((project_id, group_id), [])

    def add_member(self, project_id: str, group_id: str, member_id: str, name: str) -> None:
        self.members.setdefault((project_id, group_id), []).append(
            {"TeamFoundationId": member_id, "DisplayName": name}
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport())

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        prefix = f"/tfs/{ORG}/"
        path = request.url.path
        if not path.startswith(prefix):
            return httpx.Response(404, text="unknown collection")
        parts = path[len(prefix):].split("/")
        query = {k: v[0] for k, v in parse_qs(request.url.query.decode()).items()}

        if parts == ["_apis", "projects"]:
            return self._respond(("list_projects",), {"value": self.projects})
        project_id = parts[0]
        endpoint = parts[-1]
        if endpoint == "ReadScopedApplicationGroupsJson":
            return self._respond(
                ("list_groups", project_id),
                {"identities": self.groups.get(project_id, [])},
            )
        if endpoint == "ReadGroupMembers":
            group_id = query.get("scope", "")
            return self._respond(
                ("list_group_members", project_id, group_id),
                {"identities": self.members.get((project_id, group_id), [])},
            )
        if endpoint == "EditMembership" and request.method == "POST":
            body = json.loads(request.content)
            group_id = body["groupId"]
            removed = json.loads(body["removeItemsJson"])
            key = ("remove_member", project_id, group_id, *removed)
            self.calls[key] += 1
            if key in self.failures:
                return httpx.Response(self.failures[key], text="edit failed")
            current = self.members.get((project_id, group_id), [])
            self.members[(project_id, group_id)] = [
                m for m in current if m["TeamFoundationId"] not in removed
            ]
            return httpx.Response(200, json={"success": True})
        return httpx.Response(404, text="unknown endpoint")

    def _respond(self, key: tuple[str, ...], payload: dict[str, Any]) -> httpx.Response:
        self.calls[key] += 1
        if key in self.failures:
            return httpx.Response(self.failures[key], text=f"{key[0]} failed")
        return httpx.Response(200, json=payload)


def connection_error() -> Exception:
    return redis.ConnectionError("connection refused")
