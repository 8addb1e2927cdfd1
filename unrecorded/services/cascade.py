"""Invariant-preserving side effects of removing a user.

User deletion runs in two phases around the ``DELETE`` of the user row, all
inside the caller's transaction. :func:`lock_member_groups` first locks every
group the user belongs to.

1. :func:`mark_departing_user_messages` stamps every message the user sent or
   received with the ``deleted_sender`` / ``deleted_recipient`` marker. It has
   to run while ``sender_id`` / ``recipient_id`` still hold the user's id.
2. The row is deleted and the store's foreign-key policies fire: memberships,
   reactions, sessions, friendships and notifications go away, while
   ``groups.admin_id`` and the message address columns are set to NULL.
3. :func:`reassign_orphaned_groups` finds every group left without an admin and
   either promotes a random remaining member or removes the group.
"""

from __future__ import annotations

import logging
import random
import uuid

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from unrecorded.models import Group, GroupMember, Message
from unrecorded.monitoring import metrics

logger = logging.getLogger(__name__)


def mark_departing_user_messages(db: Session, user_id: uuid.UUID) -> dict[str, int]:
    """Record the departing user on every message that references them."""

    sent = db.execute(
        update(Message)
        .where(Message.sender_id == user_id)
        .values(deleted_sender=user_id)
        .execution_options(synchronize_session=False)
    )
    received = db.execute(
        update(Message)
        .where(Message.recipient_id == user_id)
        .values(deleted_recipient=user_id)
        .execution_options(synchronize_session=False)
    )
    stats = {
        "messages_sent_marked": sent.rowcount or 0,
        "messages_received_marked": received.rowcount or 0,
    }
    logger.debug("Marked messages of departing user %s: %s", user_id, stats)
    return stats


def lock_member_groups(db: Session, user_id: uuid.UUID) -> list[uuid.UUID]:
    """Lock every group the user belongs to, in id order.

    Holding these locks keeps concurrent membership changes from slipping
    between the member scan and the admin update of a succession.
    """

    stmt = (
        select(Group.id)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(GroupMember.user_id == user_id)
        .order_by(Group.id)
        .with_for_update(of=Group)
    )
    return list(db.execute(stmt).scalars().all())


def _elect_admin(db: Session, group_id: uuid.UUID, rng: random.Random) -> uuid.UUID | None:
    member_ids = (
        db.execute(
            select(GroupMember.user_id)
            .where(GroupMember.group_id == group_id)
            .order_by(GroupMember.user_id)
        )
        .scalars()
        .all()
    )
    if not member_ids:
        return None
    # Any member is an acceptable admin; the draw is random on purpose.
    return rng.choice(member_ids)


def reassign_orphaned_groups(
    db: Session,
    rng: random.Random,
    *,
    group_ids: list[uuid.UUID] | None = None,
) -> dict[str, int]:
    """Give every admin-less group a new admin, or delete it when nobody is left.

    ``group_ids`` narrows the scan to specific groups; by default every group
    whose ``admin_id`` is NULL is handled.
    """

    stmt = (
        select(Group.id)
        .where(Group.admin_id.is_(None))
        .order_by(Group.id)
        .with_for_update()
    )
    if group_ids is not None:
        stmt = stmt.where(Group.id.in_(group_ids))
    orphaned = db.execute(stmt).scalars().all()

    stats = {"groups_reassigned": 0, "groups_deleted": 0}
    for group_id in orphaned:
        new_admin = _elect_admin(db, group_id, rng)
        if new_admin is None:
            db.execute(
                delete(Group)
                .where(Group.id == group_id)
                .execution_options(synchronize_session=False)
            )
            stats["groups_deleted"] += 1
            metrics.cascade_groups_total.inc(action="deleted")
            logger.info("Deleted group %s: no members left to take over", group_id)
        else:
            db.execute(
                update(Group)
                .where(Group.id == group_id)
                .values(admin_id=new_admin)
                .execution_options(synchronize_session=False)
            )
            stats["groups_reassigned"] += 1
            metrics.cascade_groups_total.inc(action="reassigned")
            logger.info("Promoted user %s to admin of group %s", new_admin, group_id)
    return stats
