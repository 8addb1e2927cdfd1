"""Notification endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from unrecorded.database import get_db
from unrecorded.schemas import HousekeepingResult, NotificationCreate, NotificationRead
from unrecorded.services import housekeeping
from unrecorded.services import notifications as notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def create_notification(payload: NotificationCreate, db: Session = Depends(get_db)) -> NotificationRead:
    notification = notification_service.create_notification(
        db, payload.user_id, type=payload.type, content=payload.content
    )
    return NotificationRead.model_validate(notification)


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    user_id: UUID,
    unread_only: bool = False,
    db: Session = Depends(get_db),
) -> list[NotificationRead]:
    notifications = notification_service.list_notifications(db, user_id, unread_only=unread_only)
    return [NotificationRead.model_validate(item) for item in notifications]


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(notification_id: UUID, db: Session = Depends(get_db)) -> NotificationRead:
    return NotificationRead.model_validate(notification_service.mark_notification_read(db, notification_id))


@router.post("/housekeeping", response_model=HousekeepingResult)
def run_housekeeping(request: Request) -> HousekeepingResult:
    """Run the notification prune immediately instead of waiting for the daily tick."""

    stats = housekeeping.run_housekeeping(request.app.state.session_factory)
    return HousekeepingResult(**stats)
