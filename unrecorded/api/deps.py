"""FastAPI dependencies for the API layer."""

import random

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from unrecorded.core.errors import NotFoundError
from unrecorded.database import get_db
from unrecorded.models import UserSession
from unrecorded.services import sessions as session_service


def get_rng() -> random.Random:
    """Source of randomness for admin succession; overridden in tests."""

    return random.SystemRandom()


def get_live_session(
    x_session_token: str = Header(..., alias="X-Session-Token"),
    db: Session = Depends(get_db),
) -> UserSession:
    """Resolve the session named by the ``X-Session-Token`` header.

    Unknown tokens and expired sessions both answer 401.
    """

    try:
        return session_service.resolve_session_token(db, x_session_token)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate session",
        ) from None
