"""Shared pytest fixtures for backend tests."""

from __future__ import annotations

import itertools
import os
import random
from typing import Callable, Iterator

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["HOUSEKEEPING_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.dialects import mysql
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from unrecorded.api.deps import get_rng
from unrecorded.database import build_engine, get_db
from unrecorded.main import app
from unrecorded.models import Base, User
from unrecorded.services import users as user_service

SQLITE_URL = "sqlite+pysqlite:///:memory:"


@pytest.fixture()
def test_engine() -> Iterator[Engine]:
    """Provide an in-memory SQLite engine with foreign keys enforced."""

    engine = build_engine(
        SQLITE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(test_engine) -> sessionmaker[Session]:
    """Return a session factory bound to the test engine."""

    return sessionmaker(bind=test_engine, future=True)


@pytest.fixture()
def db_session(session_factory) -> Iterator[Session]:
    """Yield a SQLAlchemy session for unit tests."""

    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def locked_selects(db_session) -> Iterator[list[str]]:
    """Collect SELECTs issued by ``db_session`` that take row locks.

    SQLite drops ``FOR UPDATE``, so statements are rendered for MySQL.
    """

    locked: list[str] = []

    def _capture(state) -> None:
        if state.is_select:
            sql = str(state.statement.compile(dialect=mysql.dialect()))
            if "FOR UPDATE" in sql:
                locked.append(sql.replace("`", ""))

    event.listen(db_session, "do_orm_execute", _capture)
    try:
        yield locked
    finally:
        event.remove(db_session, "do_orm_execute", _capture)


@pytest.fixture()
def unenforced_session_factory() -> Iterator[sessionmaker[Session]]:
    """Session factory on an engine that ignores foreign keys.

    Lets tests leave rows behind whose owner no longer exists.
    """

    engine = create_engine(
        SQLITE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    try:
        yield sessionmaker(bind=engine, future=True)
    finally:
        engine.dispose()


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def make_user(db_session) -> Callable[..., User]:
    """Factory creating users with unique usernames, emails and keys."""

    counter = itertools.count(1)

    def _make(name: str | None = None, password: str = "correct horse", session: Session | None = None) -> User:
        index = next(counter)
        username = name or f"user{index}"
        return user_service.create_user(
            session or db_session,
            username=username,
            email=f"{username}@example.com",
            password=password,
            public_key=f"pk-{username}-{index}",
            private_key_encrypted=f"sk-{username}",
        )

    return _make


@pytest.fixture()
def client(session_factory) -> Iterator[TestClient]:
    """Yield a FastAPI TestClient with the database dependency overridden."""

    def override_get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    previous_factory = app.state.session_factory
    app.state.session_factory = session_factory
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rng] = lambda: random.Random(1234)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.session_factory = previous_factory
