"""Friendship endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from unrecorded.database import get_db
from unrecorded.models import FriendshipStatus
from unrecorded.schemas import FriendshipCreate, FriendshipRead, FriendshipStatusUpdate
from unrecorded.services import friendships as friendship_service

router = APIRouter(prefix="/friendships", tags=["friendships"])


@router.post("", response_model=FriendshipRead, status_code=status.HTTP_201_CREATED)
def create_friendship(payload: FriendshipCreate, db: Session = Depends(get_db)) -> FriendshipRead:
    friendship = friendship_service.create_friendship(
        db, payload.user_id_1, payload.user_id_2, payload.status
    )
    return FriendshipRead.model_validate(friendship)


@router.get("/{user_a}/{user_b}", response_model=FriendshipRead)
def get_friendship(user_a: UUID, user_b: UUID, db: Session = Depends(get_db)) -> FriendshipRead:
    return FriendshipRead.model_validate(friendship_service.get_friendship(db, user_a, user_b))


@router.patch("/{user_a}/{user_b}", response_model=FriendshipRead)
def update_friendship(
    user_a: UUID,
    user_b: UUID,
    payload: FriendshipStatusUpdate,
    db: Session = Depends(get_db),
) -> FriendshipRead:
    friendship = friendship_service.update_friendship_status(db, user_a, user_b, payload.status)
    return FriendshipRead.model_validate(friendship)


@router.delete("/{user_a}/{user_b}", status_code=status.HTTP_204_NO_CONTENT)
def delete_friendship(user_a: UUID, user_b: UUID, db: Session = Depends(get_db)) -> Response:
    friendship_service.delete_friendship(db, user_a, user_b)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=list[FriendshipRead])
def list_friendships(
    user_id: UUID,
    friendship_status: FriendshipStatus | None = None,
    db: Session = Depends(get_db),
) -> list[FriendshipRead]:
    friendships = friendship_service.list_friendships(db, user_id, friendship_status)
    return [FriendshipRead.model_validate(item) for item in friendships]
