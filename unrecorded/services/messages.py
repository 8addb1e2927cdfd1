"""Direct and group messages."""

from __future__ import annotations

import uuid

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from unrecorded.core.errors import NotFoundError, Operation, ValidationError
from unrecorded.core.validators import validate_message_destination
from unrecorded.database import transaction
from unrecorded.models import Group, GroupMember, Message, User


def _require_content(content_encrypted: str, operation: Operation) -> None:
    if not content_encrypted:
        raise ValidationError("Message content must not be empty.", operation=operation)


def send_message(
    db: Session,
    *,
    sender_id: uuid.UUID,
    content_encrypted: str,
    recipient_id: uuid.UUID | None = None,
    group_id: uuid.UUID | None = None,
) -> Message:
    """Store a message addressed to exactly one user or exactly one group."""

    validate_message_destination(recipient_id, group_id)
    _require_content(content_encrypted, Operation.INSERT)

    with transaction(db, Operation.INSERT):
        if db.get(User, sender_id) is None:
            raise NotFoundError("User", sender_id, operation=Operation.INSERT)
        if group_id is not None:
            if db.get(Group, group_id) is None:
                raise NotFoundError("Group", group_id, operation=Operation.INSERT)
            if db.get(GroupMember, (group_id, sender_id)) is None:
                raise ValidationError(
                    "Only group members can post to a group.",
                    operation=Operation.INSERT,
                )
        elif db.get(User, recipient_id) is None:
            raise NotFoundError("User", recipient_id, operation=Operation.INSERT)

        message = Message(
            sender_id=sender_id,
            recipient_id=recipient_id,
            group_id=group_id,
            is_group=group_id is not None,
            content_encrypted=content_encrypted,
        )
        db.add(message)
    return message


def get_message(db: Session, message_id: uuid.UUID) -> Message:
    message = db.get(Message, message_id, populate_existing=True)
    if message is None:
        raise NotFoundError("Message", message_id)
    return message


def list_conversation(
    db: Session,
    user_a: uuid.UUID,
    user_b: uuid.UUID,
    *,
    include_deleted: bool = False,
) -> list[Message]:
    """Direct messages exchanged between two users, oldest first."""

    stmt = select(Message).where(
        Message.group_id.is_(None),
        or_(
            and_(Message.sender_id == user_a, Message.recipient_id == user_b),
            and_(Message.sender_id == user_b, Message.recipient_id == user_a),
        ),
    )
    if not include_deleted:
        stmt = stmt.where(Message.is_deleted.is_(False))
    stmt = stmt.order_by(Message.timestamp, Message.id)
    return list(db.execute(stmt).scalars().all())


def list_group_messages(
    db: Session,
    group_id: uuid.UUID,
    *,
    include_deleted: bool = False,
) -> list[Message]:
    stmt = select(Message).where(Message.group_id == group_id)
    if not include_deleted:
        stmt = stmt.where(Message.is_deleted.is_(False))
    stmt = stmt.order_by(Message.timestamp, Message.id)
    return list(db.execute(stmt).scalars().all())


def update_message_content(db: Session, message_id: uuid.UUID, content_encrypted: str) -> Message:
    _require_content(content_encrypted, Operation.UPDATE)
    with transaction(db, Operation.UPDATE):
        message = get_message(db, message_id)
        if message.is_deleted:
            raise ValidationError("Deleted messages cannot be edited.", operation=Operation.UPDATE)
        message.content_encrypted = content_encrypted
    return message


def mark_message_deleted(db: Session, message_id: uuid.UUID) -> Message:
    """Soft-delete a message; the row stays for audit."""

    with transaction(db, Operation.UPDATE):
        message = get_message(db, message_id)
        message.is_deleted = True
    return message
