"""Pydantic schemas for API payloads."""

from .friendships import FriendshipCreate, FriendshipRead, FriendshipStatusUpdate
from .groups import (
    GroupAdminTransfer,
    GroupCreate,
    GroupMemberCreate,
    GroupMemberRead,
    GroupMemberRoleUpdate,
    GroupRead,
    GroupRename,
)
from .messages import (
    MessageContentUpdate,
    MessageCreate,
    MessageRead,
    ReactionCreate,
    ReactionRead,
)
from .notifications import HousekeepingResult, NotificationCreate, NotificationRead
from .sessions import SessionCreate, SessionRead, SessionRenew
from .users import (
    EmailUpdate,
    KeysUpdate,
    PasswordChange,
    UserCreate,
    UserDeletionRead,
    UsernameUpdate,
    UserRead,
)

__all__ = [
    "UserCreate",
    "UserRead",
    "UsernameUpdate",
    "EmailUpdate",
    "PasswordChange",
    "KeysUpdate",
    "UserDeletionRead",
    "FriendshipCreate",
    "FriendshipRead",
    "FriendshipStatusUpdate",
    "GroupCreate",
    "GroupRead",
    "GroupRename",
    "GroupAdminTransfer",
    "GroupMemberCreate",
    "GroupMemberRead",
    "GroupMemberRoleUpdate",
    "MessageCreate",
    "MessageRead",
    "MessageContentUpdate",
    "ReactionCreate",
    "ReactionRead",
    "SessionCreate",
    "SessionRead",
    "SessionRenew",
    "NotificationCreate",
    "NotificationRead",
    "HousekeepingResult",
]
