"""Schemas for friendship links."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from unrecorded.models.enums import FriendshipStatus


class FriendshipCreate(BaseModel):
    user_id_1: UUID
    user_id_2: UUID
    status: FriendshipStatus = Field(
        default=FriendshipStatus.PENDING,
        description="FRD for friends, UNK for unknown, PND for a pending request",
    )


class FriendshipStatusUpdate(BaseModel):
    status: FriendshipStatus


class FriendshipRead(BaseModel):
    """A friendship as stored, with ``user_id_1 < user_id_2``."""

    model_config = ConfigDict(from_attributes=True)

    user_id_1: UUID
    user_id_2: UUID
    status: FriendshipStatus
