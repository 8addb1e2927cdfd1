"""Field constraints enforced before anything is written to the store."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from unrecorded.core.errors import Operation, ValidationError
from unrecorded.models.enums import FriendshipStatus

logger = logging.getLogger(__name__)

USERNAME_MAX_LENGTH = 30
EMAIL_MAX_LENGTH = 254
GROUP_NAME_MAX_LENGTH = 50
GROUP_ROLE_MAX_LENGTH = 50
EMOJI_MAX_LENGTH = 4
NOTIFICATION_TYPE_MAX_LENGTH = 15


def _require_text(value: str, max_length: int, field: str, operation: Operation) -> str:
    if not value or not value.strip() or len(value) > max_length:
        logger.warning("Validation failed for %s: %r", field, value)
        raise ValidationError(
            f"Invalid {field}. It must not be blank and must be {max_length} characters or less.",
            operation=operation,
        )
    return value


def validate_username(username: str, operation: Operation = Operation.INSERT) -> str:
    return _require_text(username, USERNAME_MAX_LENGTH, "username", operation)


def validate_email(email: str, operation: Operation = Operation.INSERT) -> str:
    _require_text(email, EMAIL_MAX_LENGTH, "email address", operation)
    if "@" not in email or "." not in email:
        logger.warning("Validation failed for email address: %r", email)
        raise ValidationError("Invalid email address.", operation=operation)
    return email


def validate_password(password: str, operation: Operation = Operation.INSERT) -> str:
    if not password or not password.strip():
        raise ValidationError("Password must not be blank.", operation=operation)
    return password


def validate_friendship_status(status: str | FriendshipStatus, operation: Operation = Operation.INSERT) -> FriendshipStatus:
    try:
        return FriendshipStatus(status)
    except ValueError:
        raise ValidationError(f"Invalid friendship status: {status}", operation=operation) from None


def validate_user_link(user_id_1: uuid.UUID, user_id_2: uuid.UUID, operation: Operation = Operation.INSERT) -> None:
    if user_id_1 == user_id_2:
        raise ValidationError("Links cannot point to the same user.", operation=operation)


def validate_group_name(name: str, operation: Operation = Operation.INSERT) -> str:
    return _require_text(name, GROUP_NAME_MAX_LENGTH, "group name", operation)


def validate_group_role(role: str, operation: Operation = Operation.INSERT) -> str:
    return _require_text(role, GROUP_ROLE_MAX_LENGTH, "group role", operation)


def validate_emoji(emoji: str, operation: Operation = Operation.INSERT) -> str:
    return _require_text(emoji, EMOJI_MAX_LENGTH, "emoji", operation)


def validate_notification_type(kind: str, operation: Operation = Operation.INSERT) -> str:
    return _require_text(kind, NOTIFICATION_TYPE_MAX_LENGTH, "notification type", operation)


def validate_message_destination(
    recipient_id: uuid.UUID | None,
    group_id: uuid.UUID | None,
) -> None:
    """A message goes to exactly one user or exactly one group."""

    if (recipient_id is None) == (group_id is None):
        raise ValidationError(
            "A message must have either a recipient or a group, but not both.",
            operation=Operation.INSERT,
        )


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ensure_future_expiry(
    expires_at: datetime,
    now: datetime | None = None,
    operation: Operation = Operation.INSERT,
) -> datetime:
    """Reject a session expiry that is not strictly in the future."""

    current = as_utc(now) if now is not None else datetime.now(timezone.utc)
    normalised = as_utc(expires_at)
    if normalised <= current:
        raise ValidationError("Session is already expired!", operation=operation)
    return normalised
