"""Membership API schemas: flat records, member removal and error bodies."""

from pydantic import BaseModel, ConfigDict, Field

from membership_api.application.dtos import FlatRecord


class FlatRecordResponse(BaseModel):
    """One project/group/member row, serialized with the UI's column names."""

    model_config = ConfigDict(populate_by_name=True)

    project: str = Field(..., alias="Project")
    project_id: str = Field(..., alias="ProjectId")
    group: str = Field(..., alias="Group")
    group_id: str = Field(..., alias="GroupId")
    member: str = Field(..., alias="Member")
    member_id: str = Field(..., alias="MemberId")

    @classmethod
    def from_record(cls, record: FlatRecord) -> "FlatRecordResponse":
        return cls(
            project=record.project,
            project_id=record.project_id,
            group=record.group,
            group_id=record.group_id,
            member=record.member,
            member_id=record.member_id,
        )


class RemoveMemberRequest(BaseModel):
    """Body of POST /api/remove-member."""

    model_config = ConfigDict(populate_by_name=True)

    environment: str | None = Field(None, description="server or services")
    project_id: str = Field(..., alias="projectId", min_length=1)
    group_id: str = Field(..., alias="groupId", min_length=1)
    member_id: str = Field(..., alias="memberId", min_length=1)


class RemoveMemberResponse(BaseModel):
    """Successful member removal."""

    message: str


class ErrorResponse(BaseModel):
    """Error body: message plus optional structured details."""

    error: str
    details: dict | None = None
