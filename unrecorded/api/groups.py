"""Group and membership endpoints."""

from __future__ import annotations

import random
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from unrecorded.api.deps import get_rng
from unrecorded.database import get_db
from unrecorded.schemas import (
    GroupAdminTransfer,
    GroupCreate,
    GroupMemberCreate,
    GroupMemberRead,
    GroupMemberRoleUpdate,
    GroupRead,
    GroupRename,
    MessageRead,
)
from unrecorded.services import groups as group_service
from unrecorded.services import messages as message_service

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("", response_model=GroupRead, status_code=status.HTTP_201_CREATED)
def create_group(payload: GroupCreate, db: Session = Depends(get_db)) -> GroupRead:
    group = group_service.create_group(db, name=payload.name, admin_id=payload.admin_id)
    return GroupRead.model_validate(group)


@router.get("", response_model=list[GroupRead])
def list_groups_by_admin(admin_id: UUID, db: Session = Depends(get_db)) -> list[GroupRead]:
    return [GroupRead.model_validate(group) for group in group_service.list_groups_by_admin(db, admin_id)]


@router.get("/{group_id}", response_model=GroupRead)
def get_group(group_id: UUID, db: Session = Depends(get_db)) -> GroupRead:
    return GroupRead.model_validate(group_service.find_group_by_id(db, group_id))


@router.patch("/{group_id}", response_model=GroupRead)
def rename_group(group_id: UUID, payload: GroupRename, db: Session = Depends(get_db)) -> GroupRead:
    return GroupRead.model_validate(group_service.rename_group(db, group_id, payload.name))


@router.put("/{group_id}/admin", response_model=GroupRead)
def transfer_admin(group_id: UUID, payload: GroupAdminTransfer, db: Session = Depends(get_db)) -> GroupRead:
    return GroupRead.model_validate(group_service.transfer_admin(db, group_id, payload.admin_id))


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(group_id: UUID, db: Session = Depends(get_db)) -> Response:
    group_service.delete_group(db, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{group_id}/members", response_model=list[GroupMemberRead])
def list_members(group_id: UUID, db: Session = Depends(get_db)) -> list[GroupMemberRead]:
    return [GroupMemberRead.model_validate(member) for member in group_service.list_group_members(db, group_id)]


@router.post("/{group_id}/members", response_model=GroupMemberRead, status_code=status.HTTP_201_CREATED)
def add_member(group_id: UUID, payload: GroupMemberCreate, db: Session = Depends(get_db)) -> GroupMemberRead:
    membership = group_service.add_group_member(db, group_id, payload.user_id, payload.role)
    return GroupMemberRead.model_validate(membership)


@router.patch("/{group_id}/members/{user_id}", response_model=GroupMemberRead)
def update_member_role(
    group_id: UUID,
    user_id: UUID,
    payload: GroupMemberRoleUpdate,
    db: Session = Depends(get_db),
) -> GroupMemberRead:
    membership = group_service.update_member_role(db, group_id, user_id, payload.role)
    return GroupMemberRead.model_validate(membership)


@router.delete("/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    group_id: UUID,
    user_id: UUID,
    db: Session = Depends(get_db),
    rng: random.Random = Depends(get_rng),
) -> Response:
    """Remove a member; removing the admin promotes someone else or deletes an empty group."""

    group_service.remove_group_member(db, group_id, user_id, rng=rng)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{group_id}/messages", response_model=list[MessageRead])
def list_group_messages(
    group_id: UUID,
    include_deleted: bool = False,
    db: Session = Depends(get_db),
) -> list[MessageRead]:
    group_service.find_group_by_id(db, group_id)
    messages = message_service.list_group_messages(db, group_id, include_deleted=include_deleted)
    return [MessageRead.model_validate(message) for message in messages]
