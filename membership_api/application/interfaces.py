"""Ports for the application layer.

Protocols define the contract the aggregator needs from the upstream
identity source (DIP); the Azure DevOps client implements it.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from membership_api.domain.value_objects import ConnectionParams


class IUpstreamClient(Protocol):
    """Identity source for one environment: three reads and one mutation."""

    async def list_projects(self) -> list[dict[str, Any]]:
        """Return raw project objects."""

    async def list_groups(self, project_id: str) -> list[dict[str, Any]]:
        """Return raw group objects of a project."""

    async def list_group_members(self, project_id: str, group_id: str) -> list[dict[str, Any]]:
        """Return raw member objects of a group."""

    async def remove_member(self, project_id: str, group_id: str, member_id: str) -> None:
        """Remove one member from one group; raise UpstreamException on failure."""


# Builds a fresh client per call from resolved connection parameters.
UpstreamClientFactory = Callable[[ConnectionParams], IUpstreamClient]
