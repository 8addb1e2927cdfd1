from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DDL,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    LargeBinary,
    String,
    Text,
    Uuid,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from unrecorded.core.errors import Operation
from unrecorded.models.base import Base
from unrecorded.models.enums import FriendshipStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def _outside_mysql(ddl, target, bind, dialect=None, **kw) -> bool:
    # MySQL rejects CHECK constraints on columns with referential actions.
    return dialect is None or dialect.name != "mysql"


SINGLE_DESTINATION_SQL = (
    "(group_id IS NULL AND (recipient_id IS NOT NULL OR deleted_recipient IS NOT NULL))"
    " OR (group_id IS NOT NULL AND recipient_id IS NULL AND deleted_recipient IS NULL)"
)


class User(Base):
    """Application user. Deleting a user is the one event that fans out cascades."""

    __tablename__ = "users"
    __table_args__ = (
        Index("username_index", "username"),
        Index("email_index", "email"),
        Index("public_key_index", "public_key"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    password_salt: Mapped[bytes] = mapped_column(LargeBinary(32), nullable=False)
    email: Mapped[str] = mapped_column(String(254), unique=True, nullable=False)
    public_key: Mapped[str] = mapped_column(String(512), unique=True, nullable=False)
    private_key_encrypted: Mapped[str] = mapped_column(Text, nullable=False)


class Friendship(Base):
    """Unordered link between two users, stored with ``user_id_1 < user_id_2``."""

    __tablename__ = "friendships"
    __table_args__ = (Index("status_index", "status"),)

    user_id_1: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"), primary_key=True
    )
    user_id_2: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"), primary_key=True
    )
    status: Mapped[FriendshipStatus] = mapped_column(
        SAEnum(
            FriendshipStatus,
            name="friendship_status",
            native_enum=False,
            length=3,
            values_callable=_enum_values,
        ),
        nullable=False,
    )


class Group(Base):
    """Chat group with a single administrator.

    ``admin_id`` is only ever NULL between the removal of the admin's user row
    and the succession step that runs in the same transaction.
    """

    __tablename__ = "groups"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    admin_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="SET NULL"), nullable=True
    )

    members: Mapped[list["GroupMember"]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GroupMember.user_id",
    )


class GroupMember(Base):
    """Link table between group and user with a role."""

    __tablename__ = "group_members"

    group_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("groups.id", onupdate="CASCADE", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"), primary_key=True
    )
    role: Mapped[str] = mapped_column(String(50), nullable=False)

    group: Mapped[Group] = relationship(back_populates="members")


class Message(Base):
    """Encrypted message addressed to one user or one group.

    A departed sender or recipient is remembered through ``deleted_sender`` /
    ``deleted_recipient`` after the foreign key has nulled the live column.
    """

    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint(SINGLE_DESTINATION_SQL, name="single_destination").ddl_if(
            callable_=_outside_mysql
        ),
        Index("timestamp_index", "timestamp"),
        Index("deleted_sender_index", "deleted_sender"),
        Index("deleted_recipient_index", "deleted_recipient"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    sender_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="SET NULL"), nullable=True
    )
    deleted_sender: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    recipient_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="SET NULL"), nullable=True
    )
    deleted_recipient: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    group_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("groups.id", onupdate="CASCADE", ondelete="CASCADE"), nullable=True
    )
    is_group: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    content_encrypted: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    reactions: Mapped[list["Reaction"]] = relationship(
        back_populates="message",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Reaction.emoji",
    )


class Reaction(Base):
    """Emoji reaction of a user to a message."""

    __tablename__ = "reactions"

    message_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("messages.id", onupdate="CASCADE", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"), primary_key=True
    )
    emoji: Mapped[str] = mapped_column(String(4), primary_key=True)

    message: Mapped[Message] = relationship(back_populates="reactions")


class UserSession(Base):
    """Login session. Expired rows stay in place and are refused at use time."""

    __tablename__ = "sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"), nullable=False, index=True
    )
    token: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Notification(Base):
    """User notification; pruned by housekeeping once read or orphaned."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(15), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )


class ErrorLog(Base):
    """Append-only diagnostic record of a failed store operation."""

    __tablename__ = "dae"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    operation: Mapped[Operation] = mapped_column(
        SAEnum(
            Operation,
            name="dae_operation",
            native_enum=False,
            length=10,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    related_entity: Mapped[str] = mapped_column(String(25), nullable=False)
    stack_trace: Mapped[str] = mapped_column(Text, nullable=False)
    additional_info: Mapped[str | None] = mapped_column(Text, nullable=True)


@event.listens_for(UserSession, "before_insert")
def _guard_session_insert(mapper, connection, target: UserSession) -> None:
    from unrecorded.core.validators import ensure_future_expiry

    target.expires_at = ensure_future_expiry(target.expires_at, operation=Operation.INSERT)


@event.listens_for(UserSession, "before_update")
def _guard_session_update(mapper, connection, target: UserSession) -> None:
    from unrecorded.core.validators import ensure_future_expiry

    target.expires_at = ensure_future_expiry(target.expires_at, operation=Operation.UPDATE)


_SINGLE_DESTINATION_TRIGGER = """
CREATE TRIGGER messages_single_destination_{event} BEFORE {event_upper} ON messages
FOR EACH ROW
BEGIN
    IF NOT ((NEW.group_id IS NULL AND (NEW.recipient_id IS NOT NULL OR NEW.deleted_recipient IS NOT NULL))
            OR (NEW.group_id IS NOT NULL AND NEW.recipient_id IS NULL AND NEW.deleted_recipient IS NULL)) THEN
        SIGNAL SQLSTATE '45000'
            SET MESSAGE_TEXT = 'A message must target exactly one user or one group';
    END IF;
END
"""

for _event in ("insert", "update"):
    event.listen(
        Message.__table__,
        "after_create",
        DDL(
            _SINGLE_DESTINATION_TRIGGER.format(event=_event, event_upper=_event.upper())
        ).execute_if(dialect="mysql"),
    )
