"""User accounts and the two-phase user deletion."""

from __future__ import annotations

import logging
import random
import uuid

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from unrecorded.core import security
from unrecorded.core.errors import CascadeFailure, NotFoundError, Operation, ValidationError
from unrecorded.core.validators import validate_email, validate_password, validate_username
from unrecorded.database import transaction
from unrecorded.models import User
from unrecorded.monitoring import metrics
from unrecorded.services.cascade import (
    lock_member_groups,
    mark_departing_user_messages,
    reassign_orphaned_groups,
)

logger = logging.getLogger(__name__)


def create_user(
    db: Session,
    *,
    username: str,
    email: str,
    password: str,
    public_key: str,
    private_key_encrypted: str,
) -> User:
    validate_username(username)
    validate_email(email)
    validate_password(password)
    if not public_key or not public_key.strip():
        raise ValidationError("Public key must not be blank.", operation=Operation.INSERT)

    salt = security.generate_salt()
    user = User(
        username=username,
        email=email,
        password_salt=salt,
        password_hash=security.get_password_hash(password, salt),
        public_key=public_key,
        private_key_encrypted=private_key_encrypted,
    )
    with transaction(db, Operation.INSERT):
        db.add(user)
    logger.info("Created user %s", user.id)
    return user


def find_user_by_id(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id, populate_existing=True)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def find_user_by_username(db: Session, username: str) -> User:
    user = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if user is None:
        raise NotFoundError("User", username)
    return user


def find_user_by_email(db: Session, email: str) -> User:
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        raise NotFoundError("User", email)
    return user


def update_username(db: Session, user_id: uuid.UUID, username: str) -> User:
    validate_username(username, Operation.UPDATE)
    with transaction(db, Operation.UPDATE):
        user = find_user_by_id(db, user_id)
        user.username = username
    return user


def update_email(db: Session, user_id: uuid.UUID, email: str) -> User:
    validate_email(email, Operation.UPDATE)
    with transaction(db, Operation.UPDATE):
        user = find_user_by_id(db, user_id)
        user.email = email
    return user


def change_password(db: Session, user_id: uuid.UUID, new_password: str) -> User:
    """Replace the password hash, drawing a fresh salt."""

    validate_password(new_password, Operation.UPDATE)
    with transaction(db, Operation.UPDATE):
        user = find_user_by_id(db, user_id)
        user.password_salt = security.generate_salt()
        user.password_hash = security.get_password_hash(new_password, user.password_salt)
    return user


def update_keys(
    db: Session,
    user_id: uuid.UUID,
    *,
    public_key: str,
    private_key_encrypted: str,
) -> User:
    if not public_key or not public_key.strip():
        raise ValidationError("Public key must not be blank.", operation=Operation.UPDATE)
    with transaction(db, Operation.UPDATE):
        user = find_user_by_id(db, user_id)
        user.public_key = public_key
        user.private_key_encrypted = private_key_encrypted
    return user


def verify_password(db: Session, username: str, password: str) -> User | None:
    """Return the user when the credentials match, otherwise ``None``."""

    try:
        user = find_user_by_username(db, username)
    except NotFoundError:
        return None
    if not security.verify_password(password, user.password_hash, user.password_salt):
        return None
    return user


def delete_user(db: Session, user_id: uuid.UUID, rng: random.Random | None = None) -> dict[str, int]:
    """Remove a user and apply every cascade in one transaction.

    Messages are marked before the row goes away, the store's foreign keys
    then drop or null the dependants, and finally every group left without
    an admin gets a new one or is removed. Admin selection is random.
    """

    rng = rng or random.SystemRandom()
    with transaction(db, Operation.DELETE):
        find_user_by_id(db, user_id)
        try:
            lock_member_groups(db, user_id)
            stats = mark_departing_user_messages(db, user_id)
            db.flush()
            db.execute(
                delete(User)
                .where(User.id == user_id)
                .execution_options(synchronize_session=False)
            )
            db.flush()
            stats.update(reassign_orphaned_groups(db, rng))
        except SQLAlchemyError as exc:
            metrics.cascade_failures_total.inc()
            logger.error("Cascade failed while deleting user %s: %s", user_id, exc, exc_info=True)
            raise CascadeFailure(f"Deleting user {user_id} failed: {exc}") from exc
    # Bulk statements bypass the identity map.
    db.expire_all()
    metrics.cascade_users_deleted_total.inc()
    logger.info("Deleted user %s: %s", user_id, stats)
    return stats
