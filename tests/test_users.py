"""Tests for user account operations."""

from __future__ import annotations

import uuid

import pytest

from unrecorded.core.errors import ConstraintViolation, NotFoundError, ValidationError
from unrecorded.services import users as user_service


def test_create_user_hashes_password_with_salt(db_session, make_user):
    user = make_user("alice", password="s3cret-pass")

    assert user.password_hash != "s3cret-pass"
    assert len(user.password_salt) == 32
    assert user_service.verify_password(db_session, "alice", "s3cret-pass").id == user.id
    assert user_service.verify_password(db_session, "alice", "wrong") is None
    assert user_service.verify_password(db_session, "nobody", "s3cret-pass") is None


def test_lookups_by_username_email_and_id(db_session, make_user):
    user = make_user("bob")

    assert user_service.find_user_by_username(db_session, "bob").id == user.id
    assert user_service.find_user_by_email(db_session, "bob@example.com").id == user.id
    assert user_service.find_user_by_id(db_session, user.id).username == "bob"
    with pytest.raises(NotFoundError):
        user_service.find_user_by_id(db_session, uuid.uuid4())
    with pytest.raises(NotFoundError):
        user_service.find_user_by_username(db_session, "carol")


@pytest.mark.parametrize(
    ("username", "email"),
    [
        ("", "a@example.com"),
        ("x" * 31, "a@example.com"),
        ("valid", "not-an-email"),
        ("valid", "   "),
    ],
)
def test_create_user_rejects_malformed_fields(db_session, username, email):
    with pytest.raises(ValidationError):
        user_service.create_user(
            db_session,
            username=username,
            email=email,
            password="password",
            public_key="pk",
            private_key_encrypted="sk",
        )


def test_duplicate_username_is_a_constraint_violation(db_session, make_user):
    make_user("alice")

    with pytest.raises(ConstraintViolation):
        user_service.create_user(
            db_session,
            username="alice",
            email="other@example.com",
            password="password",
            public_key="another-key",
            private_key_encrypted="sk",
        )
    assert user_service.find_user_by_email(db_session, "alice@example.com").username == "alice"


def test_updates_apply_and_validate(db_session, make_user):
    user = make_user("dave")
    user_id = user.id

    user_service.update_username(db_session, user_id, "david")
    user_service.update_email(db_session, user_id, "david@example.org")
    user_service.update_keys(db_session, user_id, public_key="new-pk", private_key_encrypted="new-sk")
    old_salt = user_service.find_user_by_id(db_session, user_id).password_salt
    user_service.change_password(db_session, user_id, "brand new")

    stored = user_service.find_user_by_id(db_session, user_id)
    assert stored.username == "david"
    assert stored.email == "david@example.org"
    assert stored.public_key == "new-pk"
    assert stored.password_salt != old_salt
    assert user_service.verify_password(db_session, "david", "brand new") is not None

    with pytest.raises(ValidationError):
        user_service.update_email(db_session, user_id, "missing-at.example")
    with pytest.raises(ValidationError):
        user_service.change_password(db_session, user_id, "  ")
