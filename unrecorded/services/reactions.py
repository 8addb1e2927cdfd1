"""Emoji reactions on messages."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from unrecorded.core.errors import ConstraintViolation, NotFoundError, Operation
from unrecorded.core.validators import validate_emoji
from unrecorded.database import transaction
from unrecorded.models import Message, Reaction, User


def react_to_message(db: Session, message_id: uuid.UUID, user_id: uuid.UUID, emoji: str) -> Reaction:
    validate_emoji(emoji)
    with transaction(db, Operation.INSERT):
        if db.get(Message, message_id) is None:
            raise NotFoundError("Message", message_id, operation=Operation.INSERT)
        if db.get(User, user_id) is None:
            raise NotFoundError("User", user_id, operation=Operation.INSERT)
        if db.get(Reaction, (message_id, user_id, emoji)) is not None:
            raise ConstraintViolation("Reaction already exists.", operation=Operation.INSERT)
        reaction = Reaction(message_id=message_id, user_id=user_id, emoji=emoji)
        db.add(reaction)
    return reaction


def list_reactions(db: Session, message_id: uuid.UUID) -> list[Reaction]:
    stmt = (
        select(Reaction)
        .where(Reaction.message_id == message_id)
        .order_by(Reaction.emoji, Reaction.user_id)
    )
    return list(db.execute(stmt).scalars().all())
