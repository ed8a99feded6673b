"""Membership aggregator: project → group → member fan-out into flat records.

Every level is read through the cache-aside store. Below the top level each
branch is isolated: a failed group-list fetch drops that project, a failed
member fetch drops that group, and the failure is returned as a
BranchFailure next to the records instead of being raised or logged here.

With concurrency 1 branches run one at a time in upstream order. Higher
values run sibling branches as tasks and cap in-flight upstream fetches with
a shared semaphore; only leaf fetches hold a permit so nested branches
cannot starve each other.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from membership_api.application.dtos import (
    AggregationResult,
    BranchFailure,
    FlatRecord,
    Group,
    Member,
    Project,
)
from membership_api.application.interfaces import UpstreamClientFactory
from membership_api.application.services.cache_aside import CacheAsideStore
from membership_api.application.services.environment_resolver import EnvironmentResolver
from membership_api.core.constants import DEFAULT_CACHE_TTL_SECONDS
from membership_api.domain.exceptions import MembershipException, ProjectNotFoundException
from membership_api.domain.value_objects import ConnectionParams
from membership_api.infrastructure.cache.keys import groups_key, members_key, projects_key

T = TypeVar("T")
R = TypeVar("R")


def _describe(exc: Exception) -> tuple[str, str]:
    """(message, error_code) for a branch failure."""
    if isinstance(exc, MembershipException):
        return exc.message, exc.error_code
    return str(exc) or exc.__class__.__name__, exc.__class__.__name__


class MembershipAggregator:
    """Build flat membership records for one project or a whole organization."""

    def __init__(
        self,
        resolver: EnvironmentResolver,
        store: CacheAsideStore,
        client_factory: UpstreamClientFactory,
        *,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        concurrency: int = 1,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got: {concurrency}")
        self._resolver = resolver
        self._store = store
        self._client_factory = client_factory
        self._ttl = ttl_seconds
        self._concurrency = concurrency
        self._fetch_slots = asyncio.Semaphore(concurrency)

    @property
    def resolver(self) -> EnvironmentResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # Cached level fetches
    # ------------------------------------------------------------------

    async def _bounded(self, fetch: Callable[[], Awaitable[T]]) -> T:
        if self._concurrency == 1:
            return await fetch()
        async with self._fetch_slots:
            return await fetch()

    async def _map(self, items: Iterable[T], branch: Callable[[T], Awaitable[R]]) -> list[R]:
        """Run branch over items, sequentially or as sibling tasks, keeping input order."""
        if self._concurrency == 1:
            return [await branch(item) for item in items]
        return list(await asyncio.gather(*(branch(item) for item in items)))

    async def _projects(self, environment: str, params: ConnectionParams) -> list[dict[str, Any]]:
        async def compute() -> list[dict[str, Any]]:
            return await self._client_factory(params).list_projects()

        return await self._store.get_or_compute(projects_key(environment), self._ttl, compute)

    async def _groups(
        self, environment: str, params: ConnectionParams, project_id: str
    ) -> list[Group]:
        async def compute() -> list[dict[str, Any]]:
            return await self._client_factory(params).list_groups(project_id)

        raw = await self._bounded(
            lambda: self._store.get_or_compute(groups_key(environment, project_id), self._ttl, compute)
        )
        return [Group.from_upstream(item) for item in raw]

    async def _members(
        self, environment: str, params: ConnectionParams, project_id: str, group_id: str
    ) -> list[Member]:
        async def compute() -> list[dict[str, Any]]:
            return await self._client_factory(params).list_group_members(project_id, group_id)

        raw = await self._bounded(
            lambda: self._store.get_or_compute(
                members_key(environment, project_id, group_id), self._ttl, compute
            )
        )
        return [Member.from_upstream(item) for item in raw]

    # ------------------------------------------------------------------
    # Fan-out branches
    # ------------------------------------------------------------------

    async def _group_branch(
        self, environment: str, params: ConnectionParams, project: Project, group: Group
    ) -> AggregationResult:
        try:
            members = await self._members(environment, params, project.id, group.team_foundation_id)
        except Exception as e:
            message, code = _describe(e)
            return AggregationResult(
                failures=[
                    BranchFailure(
                        environment=environment,
                        level="members",
                        project_id=project.id,
                        project_name=project.name,
                        group_id=group.team_foundation_id,
                        group_name=group.friendly_display_name,
                        error=message,
                        error_code=code,
                    )
                ]
            )
        return AggregationResult(records=[FlatRecord.join(project, group, m) for m in members])

    async def _project_groups(
        self, environment: str, params: ConnectionParams, project: Project, groups: list[Group]
    ) -> AggregationResult:
        result = AggregationResult()
        branches = await self._map(
            groups, lambda group: self._group_branch(environment, params, project, group)
        )
        for branch in branches:
            result.extend(branch)
        return result

    async def _project_branch(
        self, environment: str, params: ConnectionParams, project: Project
    ) -> AggregationResult:
        try:
            groups = await self._groups(environment, params, project.id)
        except Exception as e:
            message, code = _describe(e)
            return AggregationResult(
                failures=[
                    BranchFailure(
                        environment=environment,
                        level="groups",
                        project_id=project.id,
                        project_name=project.name,
                        error=message,
                        error_code=code,
                    )
                ]
            )
        return await self._project_groups(environment, params, project, groups)

    # ------------------------------------------------------------------
    # Use cases
    # ------------------------------------------------------------------

    async def list_projects(self, environment: str | None) -> list[dict[str, Any]]:
        """Return the raw project list of an environment (cached)."""
        env = self._resolver.parse(environment).value
        params = self._resolver.resolve(env)
        return await self._projects(env, params)

    async def project_records(self, environment: str | None, project_id: str) -> AggregationResult:
        """Flat records of one project.

        Raises:
            InvalidEnvironmentException: unknown or unconfigured environment.
            ProjectNotFoundException: project_id is not in the project list.
            UpstreamException: the project list or the group list could not be fetched.
        """
        env = self._resolver.parse(environment).value
        params = self._resolver.resolve(env)
        projects = [Project.from_upstream(item) for item in await self._projects(env, params)]
        project = next((p for p in projects if p.id == project_id), None)
        if project is None:
            raise ProjectNotFoundException(env, project_id)
        groups = await self._groups(env, params, project.id)
        return await self._project_groups(env, params, project, groups)

    async def all_records(self, environment: str | None) -> AggregationResult:
        """Flat records of every project; failing projects and groups are isolated.

        Raises:
            InvalidEnvironmentException: unknown or unconfigured environment.
            UpstreamException: the project list could not be fetched.
        """
        env = self._resolver.parse(environment).value
        params = self._resolver.resolve(env)
        projects = [Project.from_upstream(item) for item in await self._projects(env, params)]
        result = AggregationResult()
        branches = await self._map(
            projects, lambda project: self._project_branch(env, params, project)
        )
        for branch in branches:
            result.extend(branch)
        return result

    async def remove_member(
        self, environment: str | None, project_id: str, group_id: str, member_id: str
    ) -> bool:
        """Remove a member upstream, then invalidate that group's member list.

        Returns whether the invalidation reached the cache. Upstream failures
        propagate unchanged and leave the cache untouched.
        """
        env = self._resolver.parse(environment).value
        params = self._resolver.resolve(env)
        key = members_key(env, project_id, group_id)
        await self._client_factory(params).remove_member(project_id, group_id, member_id)
        return await self._store.invalidate(key)
