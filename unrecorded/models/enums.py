from __future__ import annotations

from enum import Enum


class FriendshipStatus(str, Enum):
    """States a link between two users can be in."""

    FRIEND = "FRD"
    UNKNOWN = "UNK"
    PENDING = "PND"


class GroupRole(str, Enum):
    """Built-in member roles. Custom role names are accepted as plain strings."""

    ADMIN = "admin"
    MEMBER = "member"
