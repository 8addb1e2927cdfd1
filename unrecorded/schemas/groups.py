"""Schemas for groups and memberships."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from unrecorded.models.enums import GroupRole


class GroupCreate(BaseModel):
    name: str = Field(..., description="Group name, up to 50 characters")
    admin_id: UUID = Field(..., description="User that administers the group and joins it first")


class GroupRename(BaseModel):
    name: str


class GroupAdminTransfer(BaseModel):
    admin_id: UUID


class GroupRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    admin_id: UUID | None = None


class GroupMemberCreate(BaseModel):
    user_id: UUID
    role: str = Field(default=GroupRole.MEMBER.value, description="Role name, up to 50 characters")


class GroupMemberRoleUpdate(BaseModel):
    role: str


class GroupMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    group_id: UUID
    user_id: UUID
    role: str
