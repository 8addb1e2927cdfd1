"""Friendship links between users."""

from __future__ import annotations

import uuid

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from unrecorded.core.errors import ConstraintViolation, NotFoundError, Operation
from unrecorded.core.validators import validate_friendship_status, validate_user_link
from unrecorded.database import transaction
from unrecorded.models import Friendship, FriendshipStatus


def _ordered_pair(user_a: uuid.UUID, user_b: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


def create_friendship(
    db: Session,
    user_a: uuid.UUID,
    user_b: uuid.UUID,
    status: FriendshipStatus | str = FriendshipStatus.PENDING,
) -> Friendship:
    validate_user_link(user_a, user_b)
    status = validate_friendship_status(status)
    first, second = _ordered_pair(user_a, user_b)
    friendship = Friendship(user_id_1=first, user_id_2=second, status=status)
    with transaction(db, Operation.INSERT):
        if db.get(Friendship, (first, second)) is not None:
            raise ConstraintViolation("Friendship already exists.", operation=Operation.INSERT)
        db.add(friendship)
    return friendship


def get_friendship(db: Session, user_a: uuid.UUID, user_b: uuid.UUID) -> Friendship:
    first, second = _ordered_pair(user_a, user_b)
    friendship = db.get(Friendship, (first, second), populate_existing=True)
    if friendship is None:
        raise NotFoundError("Friendship", f"{first}/{second}")
    return friendship


def update_friendship_status(
    db: Session,
    user_a: uuid.UUID,
    user_b: uuid.UUID,
    status: FriendshipStatus | str,
) -> Friendship:
    status = validate_friendship_status(status, Operation.UPDATE)
    with transaction(db, Operation.UPDATE):
        friendship = get_friendship(db, user_a, user_b)
        friendship.status = status
    return friendship


def delete_friendship(db: Session, user_a: uuid.UUID, user_b: uuid.UUID) -> None:
    first, second = _ordered_pair(user_a, user_b)
    with transaction(db, Operation.DELETE):
        result = db.execute(
            delete(Friendship).where(
                Friendship.user_id_1 == first,
                Friendship.user_id_2 == second,
            )
        )
        if not result.rowcount:
            raise NotFoundError("Friendship", f"{first}/{second}", operation=Operation.DELETE)


def list_friendships(
    db: Session,
    user_id: uuid.UUID,
    status: FriendshipStatus | str | None = None,
) -> list[Friendship]:
    stmt = select(Friendship).where(
        or_(Friendship.user_id_1 == user_id, Friendship.user_id_2 == user_id)
    )
    if status is not None:
        stmt = stmt.where(Friendship.status == validate_friendship_status(status, Operation.FIND))
    stmt = stmt.order_by(Friendship.user_id_1, Friendship.user_id_2)
    return list(db.execute(stmt).scalars().all())
