"""Schemas for notifications and housekeeping results."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class NotificationCreate(BaseModel):
    user_id: UUID
    type: str = Field(..., description="Notification type, up to 15 characters")
    content: str


class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    type: str
    content: str
    is_read: bool
    timestamp: datetime


class HousekeepingResult(BaseModel):
    notifications_deleted: int
