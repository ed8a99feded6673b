"""DTOs for the aggregation use cases (no dependency on HTTP or Redis).

Upstream payloads are cached raw; these types are built from them when
records are flattened.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Project:
    """Project as listed by the organization; identity key is id."""

    id: str
    name: str

    @classmethod
    def from_upstream(cls, data: dict[str, Any]) -> Project:
        return cls(id=str(data.get("id", "")), name=str(data.get("name", "")))


@dataclass(frozen=True)
class Group:
    """Scoped application group of one project."""

    team_foundation_id: str
    friendly_display_name: str

    @classmethod
    def from_upstream(cls, data: dict[str, Any]) -> Group:
        return cls(
            team_foundation_id=str(data.get("TeamFoundationId", "")),
            friendly_display_name=str(data.get("FriendlyDisplayName", "")),
        )


@dataclass(frozen=True)
class Member:
    """Identity that is a member of one group."""

    team_foundation_id: str
    display_name: str

    @classmethod
    def from_upstream(cls, data: dict[str, Any]) -> Member:
        return cls(
            team_foundation_id=str(data.get("TeamFoundationId", "")),
            display_name=str(data.get("DisplayName", "")),
        )


@dataclass(frozen=True)
class FlatRecord:
    """One (project, group, member) row; the unit returned to callers and exported."""

    project: str
    project_id: str
    group: str
    group_id: str
    member: str
    member_id: str

    @classmethod
    def join(cls, project: Project, group: Group, member: Member) -> FlatRecord:
        return cls(
            project=project.name,
            project_id=project.id,
            group=group.friendly_display_name,
            group_id=group.team_foundation_id,
            member=member.display_name,
            member_id=member.team_foundation_id,
        )


@dataclass(frozen=True)
class BranchFailure:
    """A fan-out branch that failed and contributed no records.

    level is "groups" when a project's group list could not be fetched
    (group_id/group_name are None) and "members" when one group's members
    could not be fetched.
    """

    environment: str
    level: str
    project_id: str
    project_name: str
    error: str
    error_code: str
    group_id: str | None = None
    group_name: str | None = None


@dataclass
class AggregationResult:
    """Flattened records plus the branch failures isolated while building them."""

    records: list[FlatRecord] = field(default_factory=list)
    failures: list[BranchFailure] = field(default_factory=list)

    def extend(self, other: AggregationResult) -> None:
        self.records.extend(other.records)
        self.failures.extend(other.failures)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)
