"""Message and reaction endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from unrecorded.database import get_db
from unrecorded.schemas import (
    MessageContentUpdate,
    MessageCreate,
    MessageRead,
    ReactionCreate,
    ReactionRead,
)
from unrecorded.services import messages as message_service
from unrecorded.services import reactions as reaction_service

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
def send_message(payload: MessageCreate, db: Session = Depends(get_db)) -> MessageRead:
    message = message_service.send_message(db, **payload.model_dump())
    return MessageRead.model_validate(message)


@router.get("/conversation", response_model=list[MessageRead])
def list_conversation(
    user_a: UUID,
    user_b: UUID,
    include_deleted: bool = False,
    db: Session = Depends(get_db),
) -> list[MessageRead]:
    messages = message_service.list_conversation(db, user_a, user_b, include_deleted=include_deleted)
    return [MessageRead.model_validate(message) for message in messages]


@router.get("/{message_id}", response_model=MessageRead)
def get_message(message_id: UUID, db: Session = Depends(get_db)) -> MessageRead:
    return MessageRead.model_validate(message_service.get_message(db, message_id))


@router.patch("/{message_id}", response_model=MessageRead)
def update_message(
    message_id: UUID,
    payload: MessageContentUpdate,
    db: Session = Depends(get_db),
) -> MessageRead:
    message = message_service.update_message_content(db, message_id, payload.content_encrypted)
    return MessageRead.model_validate(message)


@router.delete("/{message_id}", response_model=MessageRead)
def delete_message(message_id: UUID, db: Session = Depends(get_db)) -> MessageRead:
    """Soft-delete: the message is flagged, not removed."""

    return MessageRead.model_validate(message_service.mark_message_deleted(db, message_id))


@router.post("/{message_id}/reactions", response_model=ReactionRead, status_code=status.HTTP_201_CREATED)
def react(message_id: UUID, payload: ReactionCreate, db: Session = Depends(get_db)) -> ReactionRead:
    reaction = reaction_service.react_to_message(db, message_id, payload.user_id, payload.emoji)
    return ReactionRead.model_validate(reaction)


@router.get("/{message_id}/reactions", response_model=list[ReactionRead])
def list_reactions(message_id: UUID, db: Session = Depends(get_db)) -> list[ReactionRead]:
    message_service.get_message(db, message_id)
    return [ReactionRead.model_validate(reaction) for reaction in reaction_service.list_reactions(db, message_id)]
