"""Schemas for login sessions."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SessionCreate(BaseModel):
    user_id: UUID
    expires_at: datetime | None = Field(
        default=None,
        description="Expiry in the future; defaults to now plus the configured TTL",
    )


class SessionRenew(BaseModel):
    expires_at: datetime | None = None


class SessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    token: str
    expires_at: datetime
