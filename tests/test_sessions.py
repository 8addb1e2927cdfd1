"""Tests for the session expiry guard and token resolution."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from unrecorded.core.errors import NotFoundError, Operation, SessionExpiredError, ValidationError
from unrecorded.core.validators import ensure_future_expiry
from unrecorded.database import transaction
from unrecorded.models import UserSession
from unrecorded.services import sessions as session_service


def _session_count(db_session) -> int:
    return db_session.execute(select(func.count()).select_from(UserSession)).scalar_one()


def test_past_expiry_is_rejected_and_nothing_is_stored(db_session, make_user):
    user = make_user("alice")

    with pytest.raises(ValidationError, match="already expired"):
        session_service.create_session(
            db_session, user.id, expires_at=datetime.now(timezone.utc) - timedelta(seconds=1)
        )
    assert _session_count(db_session) == 0


def test_expiry_equal_to_now_is_rejected():
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    with pytest.raises(ValidationError):
        ensure_future_expiry(now, now=now)
    assert ensure_future_expiry(now + timedelta(microseconds=1), now=now) > now


def test_naive_expiry_is_treated_as_utc():
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    result = ensure_future_expiry(datetime(2026, 3, 1, 13, 0), now=now)
    assert result.tzinfo == timezone.utc


def test_model_guard_rejects_direct_inserts(db_session, make_user):
    user = make_user("alice")

    with pytest.raises(ValidationError):
        with transaction(db_session, Operation.INSERT):
            db_session.add(
                UserSession(
                    user_id=user.id,
                    token="direct-insert",
                    expires_at=datetime.now(timezone.utc) - timedelta(minutes=5),
                )
            )
    assert _session_count(db_session) == 0


def test_default_expiry_uses_configured_ttl(db_session, make_user):
    user = make_user("alice")
    before = datetime.now(timezone.utc)

    created = session_service.create_session(db_session, user.id)

    expires_at = created.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    assert expires_at > before + timedelta(minutes=60 * 24 - 1)
    assert created.token


def test_renew_session_enforces_guard(db_session, make_user):
    user = make_user("alice")
    created = session_service.create_session(
        db_session, user.id, expires_at=datetime.now(timezone.utc) + timedelta(minutes=5)
    )
    later = datetime.now(timezone.utc) + timedelta(days=2)

    with pytest.raises(ValidationError):
        session_service.renew_session(
            db_session, created.id, datetime.now(timezone.utc) - timedelta(minutes=1)
        )
    renewed = session_service.renew_session(db_session, created.id, later)

    assert renewed.expires_at.replace(tzinfo=timezone.utc) == later.replace(tzinfo=timezone.utc)
    assert [s.id for s in session_service.list_sessions_for_user(db_session, user.id)] == [created.id]


def test_resolve_session_token_refuses_dead_sessions(db_session, make_user):
    user = make_user("alice")
    expires_at = datetime.now(timezone.utc) + timedelta(hours=1)
    created = session_service.create_session(db_session, user.id, expires_at=expires_at, token="tok-123")

    assert session_service.resolve_session_token(db_session, "tok-123").id == created.id
    with pytest.raises(SessionExpiredError):
        session_service.resolve_session_token(db_session, "tok-123", now=expires_at + timedelta(seconds=1))
    with pytest.raises(NotFoundError):
        session_service.resolve_session_token(db_session, "unknown")
