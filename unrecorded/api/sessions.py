"""Session endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from unrecorded.api.deps import get_live_session
from unrecorded.database import get_db
from unrecorded.models import UserSession
from unrecorded.schemas import SessionCreate, SessionRead, SessionRenew
from unrecorded.services import sessions as session_service

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def create_session(payload: SessionCreate, db: Session = Depends(get_db)) -> SessionRead:
    user_session = session_service.create_session(db, payload.user_id, expires_at=payload.expires_at)
    return SessionRead.model_validate(user_session)


@router.get("/current", response_model=SessionRead)
def current_session(user_session: UserSession = Depends(get_live_session)) -> SessionRead:
    return SessionRead.model_validate(user_session)


@router.get("", response_model=list[SessionRead])
def list_sessions(user_id: UUID, db: Session = Depends(get_db)) -> list[SessionRead]:
    return [SessionRead.model_validate(item) for item in session_service.list_sessions_for_user(db, user_id)]


@router.get("/{session_id}", response_model=SessionRead)
def get_session(session_id: UUID, db: Session = Depends(get_db)) -> SessionRead:
    return SessionRead.model_validate(session_service.get_session(db, session_id))


@router.put("/{session_id}", response_model=SessionRead)
def renew_session(session_id: UUID, payload: SessionRenew, db: Session = Depends(get_db)) -> SessionRead:
    user_session = session_service.renew_session(db, session_id, payload.expires_at)
    return SessionRead.model_validate(user_session)
