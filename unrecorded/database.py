import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from unrecorded.config import get_settings
from unrecorded.core.errors import ConstraintViolation, Operation

logger = logging.getLogger(__name__)

settings = get_settings()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, *, echo: bool = False, **kwargs) -> Engine:
    """Create an engine whose foreign-key policies are enforced on every backend.

    SQLite ignores ``ON DELETE`` clauses unless the pragma is switched on for
    each connection, and the cascade engine depends on them.
    """

    if url.startswith("sqlite"):
        engine = create_engine(url, echo=echo, future=True, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    # pool_pre_ping: verify connections before using them
    kwargs.setdefault("pool_size", 10)
    kwargs.setdefault("max_overflow", 20)
    return create_engine(url, echo=echo, future=True, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.database_url, echo=settings.debug)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_session() -> Iterator[Session]:
    """Context manager for short-lived database sessions.

    Use this in background jobs instead of Depends(get_db); each run gets a
    fresh session so it never observes another transaction's stale state.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, operation: Operation = Operation.GENERAL) -> Iterator[Session]:
    """Run a unit of work that either commits completely or leaves no trace.

    Store-level integrity errors surface as :class:`ConstraintViolation`;
    everything else, cancellation included, is rolled back and re-raised.
    """

    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity error during %s: %s", operation.full_name.lower(), exc.orig)
        raise ConstraintViolation(str(exc.orig), operation=operation) from exc
    except BaseException:
        db.rollback()
        raise


def create_tables(bind: Engine | None = None) -> None:
    """Create all database tables. Deployments use Alembic instead."""

    from unrecorded.models import Base

    Base.metadata.create_all(bind=bind or engine)
