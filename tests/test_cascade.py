"""Tests for the two-phase user deletion and admin succession."""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from unrecorded.core.errors import CascadeFailure, NotFoundError
from unrecorded.models import (
    Friendship,
    Group,
    GroupMember,
    Message,
    Notification,
    Reaction,
    User,
    UserSession,
)
from unrecorded.monitoring import metrics
from unrecorded.services import cascade
from unrecorded.services import friendships as friendship_service
from unrecorded.services import groups as group_service
from unrecorded.services import messages as message_service
from unrecorded.services import notifications as notification_service
from unrecorded.services import reactions as reaction_service
from unrecorded.services import sessions as session_service
from unrecorded.services import users as user_service


def _snapshot(message: Message) -> dict:
    return {
        "recipient_id": message.recipient_id,
        "group_id": message.group_id,
        "is_group": message.is_group,
        "content_encrypted": message.content_encrypted,
        "timestamp": message.timestamp,
        "is_deleted": message.is_deleted,
    }


def test_deleting_sender_marks_messages_and_keeps_them(db_session, make_user, rng):
    alice = make_user("alice")
    bob = make_user("bob")
    alice_id, bob_id = alice.id, bob.id
    message = message_service.send_message(
        db_session, sender_id=alice_id, recipient_id=bob_id, content_encrypted="ciphertext"
    )
    message_id = message.id
    before = _snapshot(message_service.get_message(db_session, message_id))

    stats = user_service.delete_user(db_session, alice_id, rng=rng)

    assert stats["messages_sent_marked"] == 1
    stored = message_service.get_message(db_session, message_id)
    assert stored.deleted_sender == alice_id
    assert stored.sender_id is None
    assert _snapshot(stored) == before


def test_deleting_recipient_marks_direct_messages(db_session, make_user, rng):
    alice = make_user("alice")
    bob = make_user("bob")
    alice_id, bob_id = alice.id, bob.id
    message_id = message_service.send_message(
        db_session, sender_id=alice_id, recipient_id=bob_id, content_encrypted="hello"
    ).id

    stats = user_service.delete_user(db_session, bob_id, rng=rng)

    assert stats["messages_received_marked"] == 1
    stored = message_service.get_message(db_session, message_id)
    assert stored.deleted_recipient == bob_id
    assert stored.recipient_id is None
    assert stored.sender_id == alice_id
    assert stored.deleted_sender is None


def test_group_messages_survive_sender_removal(db_session, make_user, rng):
    alice = make_user("alice")
    bob = make_user("bob")
    alice_id, bob_id = alice.id, bob.id
    group_id = group_service.create_group(db_session, name="Study", admin_id=alice_id).id
    group_service.add_group_member(db_session, group_id, bob_id)
    message_id = message_service.send_message(
        db_session, sender_id=bob_id, group_id=group_id, content_encrypted="notes"
    ).id

    user_service.delete_user(db_session, bob_id, rng=rng)

    stored = message_service.get_message(db_session, message_id)
    assert stored.group_id == group_id
    assert stored.deleted_sender == bob_id
    assert stored.deleted_recipient is None


def test_admin_deletion_promotes_remaining_member(db_session, make_user, rng):
    admin = make_user("admin")
    member = make_user("member")
    admin_id, member_id = admin.id, member.id
    group_id = group_service.create_group(db_session, name="Pair", admin_id=admin_id).id
    group_service.add_group_member(db_session, group_id, member_id)

    stats = user_service.delete_user(db_session, admin_id, rng=rng)

    assert stats["groups_reassigned"] == 1
    group = group_service.find_group_by_id(db_session, group_id)
    assert group.admin_id == member_id
    assert db_session.get(GroupMember, (group_id, member_id)) is not None
    assert db_session.get(GroupMember, (group_id, admin_id)) is None


def test_admin_choice_is_drawn_from_remaining_members(db_session, make_user):
    admin = make_user("admin")
    others = [make_user(f"member{i}") for i in range(3)]
    admin_id = admin.id
    other_ids = [user.id for user in others]
    group_id = group_service.create_group(db_session, name="Crowd", admin_id=admin_id).id
    for user_id in other_ids:
        group_service.add_group_member(db_session, group_id, user_id)

    user_service.delete_user(db_session, admin_id, rng=random.Random(99))

    expected = random.Random(99).choice(sorted(other_ids))
    group = group_service.find_group_by_id(db_session, group_id)
    assert group.admin_id == expected
    assert group.admin_id in other_ids


def test_sole_admin_deletion_removes_group(db_session, make_user, rng):
    admin = make_user("admin")
    admin_id = admin.id
    group_id = group_service.create_group(db_session, name="Solo", admin_id=admin_id).id
    message_service.send_message(
        db_session, sender_id=admin_id, group_id=group_id, content_encrypted="echo"
    )

    stats = user_service.delete_user(db_session, admin_id, rng=rng)

    assert stats["groups_deleted"] == 1
    assert db_session.get(Group, group_id) is None
    assert db_session.execute(
        select(GroupMember).where(GroupMember.group_id == group_id)
    ).first() is None
    assert db_session.execute(
        select(Message).where(Message.group_id == group_id)
    ).first() is None


def test_non_admin_deletion_leaves_admin_alone(db_session, make_user, rng):
    admin = make_user("admin")
    member = make_user("member")
    admin_id, member_id = admin.id, member.id
    group_id = group_service.create_group(db_session, name="Stable", admin_id=admin_id).id
    group_service.add_group_member(db_session, group_id, member_id)

    stats = user_service.delete_user(db_session, member_id, rng=rng)

    assert stats["groups_reassigned"] == 0
    assert stats["groups_deleted"] == 0
    assert group_service.find_group_by_id(db_session, group_id).admin_id == admin_id
    assert [m.user_id for m in group_service.list_group_members(db_session, group_id)] == [admin_id]


def test_user_deletion_cascades_dependants(db_session, make_user, rng):
    alice = make_user("alice")
    bob = make_user("bob")
    alice_id, bob_id = alice.id, bob.id
    friendship_service.create_friendship(db_session, alice_id, bob_id)
    session_service.create_session(
        db_session, alice_id, expires_at=datetime.now(timezone.utc) + timedelta(hours=1)
    )
    notification_service.create_notification(db_session, alice_id, type="friend", content="hi")
    message_id = message_service.send_message(
        db_session, sender_id=bob_id, recipient_id=alice_id, content_encrypted="yo"
    ).id
    reaction_service.react_to_message(db_session, message_id, alice_id, "+1")

    user_service.delete_user(db_session, alice_id, rng=rng)

    assert db_session.get(User, alice_id) is None
    assert db_session.execute(select(Friendship)).first() is None
    assert db_session.execute(select(UserSession)).first() is None
    assert db_session.execute(select(Notification)).first() is None
    assert db_session.execute(select(Reaction)).first() is None
    assert db_session.get(Message, message_id) is not None


def test_deleting_unknown_user_raises_not_found(db_session, make_user, rng):
    make_user("alice")

    with pytest.raises(NotFoundError):
        user_service.delete_user(db_session, uuid.uuid4(), rng=rng)


def test_failed_succession_rolls_back_everything(db_session, make_user, rng, monkeypatch):
    admin = make_user("admin")
    member = make_user("member")
    admin_id, member_id = admin.id, member.id
    group_id = group_service.create_group(db_session, name="Fragile", admin_id=admin_id).id
    group_service.add_group_member(db_session, group_id, member_id)
    message_id = message_service.send_message(
        db_session, sender_id=admin_id, recipient_id=member_id, content_encrypted="bye"
    ).id
    failures_before = metrics.cascade_failures_total.value()

    def _boom(*args, **kwargs):
        raise OperationalError("UPDATE groups", {}, Exception("lock wait timeout"))

    monkeypatch.setattr(user_service, "reassign_orphaned_groups", _boom)

    with pytest.raises(CascadeFailure):
        user_service.delete_user(db_session, admin_id, rng=rng)

    assert db_session.get(User, admin_id) is not None
    assert group_service.find_group_by_id(db_session, group_id).admin_id == admin_id
    stored = message_service.get_message(db_session, message_id)
    assert stored.sender_id == admin_id
    assert stored.deleted_sender is None
    assert metrics.cascade_failures_total.value() == failures_before + 1


def test_reassign_orphaned_groups_only_touches_requested_groups(db_session, make_user, rng):
    first = make_user("first")
    second = make_user("second")
    helper = make_user("helper")
    first_id, second_id, helper_id = first.id, second.id, helper.id
    group_a = group_service.create_group(db_session, name="A", admin_id=first_id).id
    group_b = group_service.create_group(db_session, name="B", admin_id=second_id).id
    group_service.add_group_member(db_session, group_a, helper_id)
    group_service.add_group_member(db_session, group_b, helper_id)
    for group_id in (group_a, group_b):
        db_session.get(Group, group_id).admin_id = None
    db_session.flush()

    stats = cascade.reassign_orphaned_groups(db_session, rng, group_ids=[group_a])
    db_session.flush()

    assert stats == {"groups_reassigned": 1, "groups_deleted": 0}
    db_session.expire_all()
    assert db_session.get(Group, group_a).admin_id in {first_id, helper_id}
    assert db_session.get(Group, group_b).admin_id is None
    db_session.rollback()


def test_user_deletion_locks_groups_before_succession(db_session, make_user, rng, locked_selects):
    admin = make_user("admin")
    member = make_user("member")
    admin_id, member_id = admin.id, member.id
    group_id = group_service.create_group(db_session, name="Guarded", admin_id=admin_id).id
    group_service.add_group_member(db_session, group_id, member_id)
    locked_selects.clear()

    user_service.delete_user(db_session, admin_id, rng=rng)

    assert len(locked_selects) >= 2
    assert "group_members" in locked_selects[0]
    assert all("FROM groups" in sql for sql in locked_selects)
    assert group_service.find_group_by_id(db_session, group_id).admin_id == member_id
