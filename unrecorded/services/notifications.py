"""User notifications. Removal happens only through housekeeping or cascade."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from unrecorded.core.errors import NotFoundError, Operation, ValidationError
from unrecorded.core.validators import validate_notification_type
from unrecorded.database import transaction
from unrecorded.models import Notification, User


def create_notification(db: Session, user_id: uuid.UUID, *, type: str, content: str) -> Notification:
    validate_notification_type(type)
    if not content:
        raise ValidationError("Notification content must not be empty.", operation=Operation.INSERT)
    with transaction(db, Operation.INSERT):
        if db.get(User, user_id) is None:
            raise NotFoundError("User", user_id, operation=Operation.INSERT)
        notification = Notification(user_id=user_id, type=type, content=content)
        db.add(notification)
    return notification


def list_notifications(db: Session, user_id: uuid.UUID, *, unread_only: bool = False) -> list[Notification]:
    """Notifications for a user, newest first."""

    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.timestamp.desc(), Notification.id)
    return list(db.execute(stmt).scalars().all())


def mark_notification_read(db: Session, notification_id: uuid.UUID) -> Notification:
    with transaction(db, Operation.UPDATE):
        notification = db.get(Notification, notification_id, populate_existing=True)
        if notification is None:
            raise NotFoundError("Notification", notification_id, operation=Operation.UPDATE)
        notification.is_read = True
    return notification
