"""Login sessions and the write-time expiry guard."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from unrecorded.config import get_settings
from unrecorded.core.errors import NotFoundError, Operation, SessionExpiredError
from unrecorded.core.security import generate_session_token
from unrecorded.core.validators import as_utc, ensure_future_expiry
from unrecorded.database import transaction
from unrecorded.models import User, UserSession


def _default_expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=get_settings().session_ttl_minutes)


def create_session(
    db: Session,
    user_id: uuid.UUID,
    *,
    expires_at: datetime | None = None,
    token: str | None = None,
) -> UserSession:
    """Open a session for a user.

    ``expires_at`` defaults to now plus the configured TTL and must lie in the
    future; the same check runs again when the row is flushed.
    """

    expires_at = ensure_future_expiry(expires_at or _default_expiry(), operation=Operation.INSERT)
    with transaction(db, Operation.INSERT):
        if db.get(User, user_id) is None:
            raise NotFoundError("User", user_id, operation=Operation.INSERT)
        user_session = UserSession(
            user_id=user_id,
            token=token or generate_session_token(),
            expires_at=expires_at,
        )
        db.add(user_session)
    return user_session


def get_session(db: Session, session_id: uuid.UUID) -> UserSession:
    user_session = db.get(UserSession, session_id, populate_existing=True)
    if user_session is None:
        raise NotFoundError("Session", session_id)
    return user_session


def renew_session(db: Session, session_id: uuid.UUID, expires_at: datetime | None = None) -> UserSession:
    expires_at = ensure_future_expiry(expires_at or _default_expiry(), operation=Operation.UPDATE)
    with transaction(db, Operation.UPDATE):
        user_session = get_session(db, session_id)
        user_session.expires_at = expires_at
    return user_session


def list_sessions_for_user(db: Session, user_id: uuid.UUID) -> list[UserSession]:
    stmt = select(UserSession).where(UserSession.user_id == user_id).order_by(UserSession.expires_at)
    return list(db.execute(stmt).scalars().all())


def resolve_session_token(db: Session, token: str, now: datetime | None = None) -> UserSession:
    """Look up a live session by token.

    Expired sessions are kept in the store but refused here.
    """

    user_session = db.execute(
        select(UserSession).where(UserSession.token == token)
    ).scalar_one_or_none()
    if user_session is None:
        raise NotFoundError("Session", "for token", operation=Operation.FIND)
    current = as_utc(now) if now is not None else datetime.now(timezone.utc)
    if as_utc(user_session.expires_at) <= current:
        raise SessionExpiredError("Session has expired.", operation=Operation.FIND)
    return user_session
