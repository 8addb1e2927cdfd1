"""Schemas related to messages and reactions."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Payload for sending a message to exactly one user or one group."""

    sender_id: UUID
    content_encrypted: str = Field(..., description="Ciphertext produced by the client")
    recipient_id: UUID | None = None
    group_id: UUID | None = None


class MessageContentUpdate(BaseModel):
    content_encrypted: str


class MessageRead(BaseModel):
    """Serialized message including the markers left by deleted users."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sender_id: UUID | None = None
    deleted_sender: UUID | None = None
    recipient_id: UUID | None = None
    deleted_recipient: UUID | None = None
    group_id: UUID | None = None
    is_group: bool
    content_encrypted: str
    timestamp: datetime
    is_deleted: bool


class ReactionCreate(BaseModel):
    user_id: UUID
    emoji: str = Field(..., description="Emoji, up to 4 characters")


class ReactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    message_id: UUID
    user_id: UUID
    emoji: str
