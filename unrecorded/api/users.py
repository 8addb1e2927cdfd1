"""User account endpoints."""

from __future__ import annotations

import random
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from unrecorded.api.deps import get_rng
from unrecorded.database import get_db
from unrecorded.schemas import (
    EmailUpdate,
    GroupRead,
    KeysUpdate,
    PasswordChange,
    UserCreate,
    UserDeletionRead,
    UsernameUpdate,
    UserRead,
)
from unrecorded.services import groups as group_service
from unrecorded.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)) -> UserRead:
    user = user_service.create_user(db, **payload.model_dump())
    return UserRead.model_validate(user)


@router.get("/by-username/{username}", response_model=UserRead)
def get_user_by_username(username: str, db: Session = Depends(get_db)) -> UserRead:
    return UserRead.model_validate(user_service.find_user_by_username(db, username))


@router.get("/by-email/{email}", response_model=UserRead)
def get_user_by_email(email: str, db: Session = Depends(get_db)) -> UserRead:
    return UserRead.model_validate(user_service.find_user_by_email(db, email))


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: UUID, db: Session = Depends(get_db)) -> UserRead:
    return UserRead.model_validate(user_service.find_user_by_id(db, user_id))


@router.get("/{user_id}/groups", response_model=list[GroupRead])
def list_user_groups(user_id: UUID, db: Session = Depends(get_db)) -> list[GroupRead]:
    user_service.find_user_by_id(db, user_id)
    return [GroupRead.model_validate(group) for group in group_service.list_groups_for_user(db, user_id)]


@router.patch("/{user_id}/username", response_model=UserRead)
def update_username(user_id: UUID, payload: UsernameUpdate, db: Session = Depends(get_db)) -> UserRead:
    return UserRead.model_validate(user_service.update_username(db, user_id, payload.username))


@router.patch("/{user_id}/email", response_model=UserRead)
def update_email(user_id: UUID, payload: EmailUpdate, db: Session = Depends(get_db)) -> UserRead:
    return UserRead.model_validate(user_service.update_email(db, user_id, payload.email))


@router.put("/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(user_id: UUID, payload: PasswordChange, db: Session = Depends(get_db)) -> None:
    user_service.change_password(db, user_id, payload.password)


@router.put("/{user_id}/keys", response_model=UserRead)
def update_keys(user_id: UUID, payload: KeysUpdate, db: Session = Depends(get_db)) -> UserRead:
    user = user_service.update_keys(db, user_id, **payload.model_dump())
    return UserRead.model_validate(user)


@router.delete("/{user_id}", response_model=UserDeletionRead)
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    rng: random.Random = Depends(get_rng),
) -> UserDeletionRead:
    """Delete a user together with every cascade the removal implies."""

    return UserDeletionRead(**user_service.delete_user(db, user_id, rng=rng))
