"""Database models package."""

from .base import Base
from .chat import (
    ErrorLog,
    Friendship,
    Group,
    GroupMember,
    Message,
    Notification,
    Reaction,
    User,
    UserSession,
)
from .enums import FriendshipStatus, GroupRole

__all__ = [
    "Base",
    "User",
    "Friendship",
    "Group",
    "GroupMember",
    "Message",
    "Reaction",
    "UserSession",
    "Notification",
    "ErrorLog",
    "FriendshipStatus",
    "GroupRole",
]
