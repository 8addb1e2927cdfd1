"""Groups, memberships and admin succession on member removal."""

from __future__ import annotations

import logging
import random
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from unrecorded.core.errors import ConstraintViolation, NotFoundError, Operation, ValidationError
from unrecorded.core.validators import validate_group_name, validate_group_role
from unrecorded.database import transaction
from unrecorded.models import Group, GroupMember, GroupRole, User
from unrecorded.services.cascade import reassign_orphaned_groups

logger = logging.getLogger(__name__)


def _ensure_user(db: Session, user_id: uuid.UUID, operation: Operation) -> None:
    if db.get(User, user_id) is None:
        raise NotFoundError("User", user_id, operation=operation)


def _lock_group(db: Session, group_id: uuid.UUID, operation: Operation) -> Group:
    # Serializes membership changes and admin succession on one group.
    group = db.get(Group, group_id, populate_existing=True, with_for_update=True)
    if group is None:
        raise NotFoundError("Group", group_id, operation=operation)
    return group


def _get_membership(db: Session, group_id: uuid.UUID, user_id: uuid.UUID) -> GroupMember | None:
    return db.get(GroupMember, (group_id, user_id), populate_existing=True)


def create_group(db: Session, *, name: str, admin_id: uuid.UUID) -> Group:
    """Create a group; its admin joins as the first member."""

    validate_group_name(name)
    with transaction(db, Operation.INSERT):
        _ensure_user(db, admin_id, Operation.INSERT)
        group = Group(name=name, admin_id=admin_id)
        group.members.append(GroupMember(user_id=admin_id, role=GroupRole.ADMIN.value))
        db.add(group)
    logger.info("Created group %s with admin %s", group.id, admin_id)
    return group


def find_group_by_id(db: Session, group_id: uuid.UUID) -> Group:
    group = db.get(Group, group_id, populate_existing=True)
    if group is None:
        raise NotFoundError("Group", group_id)
    return group


def list_groups_by_admin(db: Session, admin_id: uuid.UUID) -> list[Group]:
    stmt = select(Group).where(Group.admin_id == admin_id).order_by(Group.name, Group.id)
    return list(db.execute(stmt).scalars().all())


def rename_group(db: Session, group_id: uuid.UUID, name: str) -> Group:
    validate_group_name(name, Operation.UPDATE)
    with transaction(db, Operation.UPDATE):
        group = find_group_by_id(db, group_id)
        group.name = name
    return group


def transfer_admin(db: Session, group_id: uuid.UUID, new_admin_id: uuid.UUID) -> Group:
    with transaction(db, Operation.UPDATE):
        group = _lock_group(db, group_id, Operation.UPDATE)
        if _get_membership(db, group_id, new_admin_id) is None:
            raise ValidationError(
                "The new admin must be a member of the group.",
                operation=Operation.UPDATE,
            )
        group.admin_id = new_admin_id
    return group


def add_group_member(
    db: Session,
    group_id: uuid.UUID,
    user_id: uuid.UUID,
    role: str = GroupRole.MEMBER.value,
) -> GroupMember:
    validate_group_role(role)
    with transaction(db, Operation.INSERT):
        _lock_group(db, group_id, Operation.INSERT)
        _ensure_user(db, user_id, Operation.INSERT)
        if _get_membership(db, group_id, user_id) is not None:
            raise ConstraintViolation("User is already a member of the group.", operation=Operation.INSERT)
        membership = GroupMember(group_id=group_id, user_id=user_id, role=role)
        db.add(membership)
    return membership


def list_group_members(db: Session, group_id: uuid.UUID) -> list[GroupMember]:
    find_group_by_id(db, group_id)
    stmt = select(GroupMember).where(GroupMember.group_id == group_id).order_by(GroupMember.user_id)
    return list(db.execute(stmt).scalars().all())


def list_groups_for_user(db: Session, user_id: uuid.UUID) -> list[Group]:
    stmt = (
        select(Group)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(GroupMember.user_id == user_id)
        .order_by(Group.name, Group.id)
    )
    return list(db.execute(stmt).scalars().all())


def update_member_role(db: Session, group_id: uuid.UUID, user_id: uuid.UUID, role: str) -> GroupMember:
    validate_group_role(role, Operation.UPDATE)
    with transaction(db, Operation.UPDATE):
        membership = _get_membership(db, group_id, user_id)
        if membership is None:
            raise NotFoundError("Group member", f"{group_id}/{user_id}", operation=Operation.UPDATE)
        membership.role = role
    return membership


def remove_group_member(
    db: Session,
    group_id: uuid.UUID,
    user_id: uuid.UUID,
    rng: random.Random | None = None,
) -> Group | None:
    """Remove a member from a group.

    When the member was the admin another member is promoted at random; when
    nobody is left the group is deleted and ``None`` is returned.
    """

    rng = rng or random.SystemRandom()
    with transaction(db, Operation.DELETE):
        group = _lock_group(db, group_id, Operation.DELETE)
        membership = _get_membership(db, group_id, user_id)
        if membership is None:
            raise NotFoundError("Group member", f"{group_id}/{user_id}", operation=Operation.DELETE)
        db.delete(membership)
        stats = {"groups_deleted": 0}
        if group.admin_id == user_id:
            group.admin_id = None
            db.flush()
            stats = reassign_orphaned_groups(db, rng, group_ids=[group_id])
    db.expire_all()
    if stats["groups_deleted"]:
        return None
    return group


def delete_group(db: Session, group_id: uuid.UUID) -> None:
    with transaction(db, Operation.DELETE):
        group = find_group_by_id(db, group_id)
        db.delete(group)
    logger.info("Deleted group %s", group_id)
