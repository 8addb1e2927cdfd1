"""Query and mutation functions over the entity store.

Every function takes the caller's SQLAlchemy ``Session`` as its first argument
and runs each mutation, including its cascade work, in one transaction.
"""

from . import (
    cascade,
    error_log,
    friendships,
    groups,
    housekeeping,
    messages,
    notifications,
    reactions,
    sessions,
    users,
)

__all__ = [
    "cascade",
    "error_log",
    "friendships",
    "groups",
    "housekeeping",
    "messages",
    "notifications",
    "reactions",
    "sessions",
    "users",
]
