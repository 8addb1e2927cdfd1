"""Tests for friendships, reactions and notifications."""

from __future__ import annotations

import uuid

import pytest

from unrecorded.core.errors import ConstraintViolation, NotFoundError, ValidationError
from unrecorded.models import FriendshipStatus
from unrecorded.services import friendships as friendship_service
from unrecorded.services import messages as message_service
from unrecorded.services import notifications as notification_service
from unrecorded.services import reactions as reaction_service


def test_friendship_pair_is_unordered(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    created = friendship_service.create_friendship(db_session, bob.id, alice.id)

    assert created.user_id_1 < created.user_id_2
    assert created.status == FriendshipStatus.PENDING
    found = friendship_service.get_friendship(db_session, alice.id, bob.id)
    assert (found.user_id_1, found.user_id_2) == (created.user_id_1, created.user_id_2)
    with pytest.raises(ConstraintViolation):
        friendship_service.create_friendship(db_session, alice.id, bob.id)


def test_friendship_rejects_self_links_and_unknown_status(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    with pytest.raises(ValidationError):
        friendship_service.create_friendship(db_session, alice.id, alice.id)
    with pytest.raises(ValidationError):
        friendship_service.create_friendship(db_session, alice.id, bob.id, "BFF")


def test_friendship_status_update_list_and_delete(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    friendship_service.create_friendship(db_session, alice.id, bob.id)
    friendship_service.create_friendship(db_session, carol.id, alice.id, "UNK")

    updated = friendship_service.update_friendship_status(db_session, bob.id, alice.id, "FRD")

    assert updated.status == FriendshipStatus.FRIEND
    assert len(friendship_service.list_friendships(db_session, alice.id)) == 2
    friends = friendship_service.list_friendships(db_session, alice.id, FriendshipStatus.FRIEND)
    assert {friends[0].user_id_1, friends[0].user_id_2} == {alice.id, bob.id}

    friendship_service.delete_friendship(db_session, alice.id, bob.id)
    with pytest.raises(NotFoundError):
        friendship_service.delete_friendship(db_session, bob.id, alice.id)
    with pytest.raises(NotFoundError):
        friendship_service.get_friendship(db_session, alice.id, bob.id)


def test_reactions(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    message = message_service.send_message(
        db_session, sender_id=alice.id, recipient_id=bob.id, content_encrypted="joke"
    )

    reaction_service.react_to_message(db_session, message.id, bob.id, "lol")
    reaction_service.react_to_message(db_session, message.id, alice.id, "+1")

    assert [r.emoji for r in reaction_service.list_reactions(db_session, message.id)] == ["+1", "lol"]
    with pytest.raises(ConstraintViolation):
        reaction_service.react_to_message(db_session, message.id, bob.id, "lol")
    with pytest.raises(ValidationError):
        reaction_service.react_to_message(db_session, message.id, bob.id, "toolong")
    with pytest.raises(NotFoundError):
        reaction_service.react_to_message(db_session, uuid.uuid4(), bob.id, "ok")


def test_notifications_listing_and_read_flag(db_session, make_user):
    alice = make_user("alice")
    first = notification_service.create_notification(db_session, alice.id, type="invite", content="a")
    notification_service.create_notification(db_session, alice.id, type="message", content="b")

    notification_service.mark_notification_read(db_session, first.id)

    assert len(notification_service.list_notifications(db_session, alice.id)) == 2
    unread = notification_service.list_notifications(db_session, alice.id, unread_only=True)
    assert [n.content for n in unread] == ["b"]
    with pytest.raises(ValidationError):
        notification_service.create_notification(db_session, alice.id, type="x" * 16, content="c")
    with pytest.raises(NotFoundError):
        notification_service.create_notification(db_session, uuid.uuid4(), type="invite", content="c")
    with pytest.raises(NotFoundError):
        notification_service.mark_notification_read(db_session, uuid.uuid4())
