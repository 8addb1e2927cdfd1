"""Daily pruning of notifications that are no longer needed.

A notification is stale once it has been read or once its owner is gone. The
prune is a single DELETE, so a run either removes every stale row or none, and
running it again without new writes removes nothing.
"""

from __future__ import annotations

import asyncio
import logging
import time as time_module
from datetime import datetime, time, timedelta, timezone
from typing import Callable

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from unrecorded.core.errors import Operation, SchedulerRunFailure
from unrecorded.core.validators import as_utc
from unrecorded.database import SessionLocal, transaction
from unrecorded.models import Notification, User
from unrecorded.monitoring import metrics
from unrecorded.services.error_log import record_error

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def prune_notifications(db: Session) -> dict[str, int]:
    """Delete read notifications and notifications of users that no longer exist."""

    owner_exists = select(User.id).where(User.id == Notification.user_id).exists()
    with transaction(db, Operation.DELETE):
        result = db.execute(
            delete(Notification)
            .where(or_(Notification.is_read.is_(True), ~owner_exists))
            .execution_options(synchronize_session=False)
        )
    return {"notifications_deleted": result.rowcount or 0}


def _record_failure(session_factory: SessionFactory, exc: Exception) -> None:
    try:
        with session_factory() as db:
            record_error(db, exc, Operation.DELETE, "Notification", "housekeeping run")
    except SQLAlchemyError:
        logger.exception("Could not record housekeeping failure")


def run_housekeeping(session_factory: SessionFactory | None = None) -> dict[str, int]:
    """Run one prune in a session of its own.

    Raises:
        SchedulerRunFailure: the prune did not complete; nothing was deleted.
    """

    factory = session_factory or SessionLocal
    try:
        with factory() as db:
            stats = prune_notifications(db)
    except Exception as exc:
        metrics.housekeeping_runs_total.inc(outcome="failure")
        logger.error("Housekeeping run failed: %s", exc, exc_info=True)
        _record_failure(factory, exc)
        raise SchedulerRunFailure(f"Housekeeping run failed: {exc}") from exc

    metrics.housekeeping_runs_total.inc(outcome="success")
    metrics.housekeeping_notifications_deleted_total.inc(stats["notifications_deleted"])
    metrics.housekeeping_last_success_timestamp.set(time_module.time())
    logger.info("Housekeeping removed %d notification(s)", stats["notifications_deleted"])
    return stats


def next_run_after(now: datetime, run_at: time) -> datetime:
    """Next UTC occurrence of ``run_at`` strictly after ``now``."""

    current = as_utc(now)
    candidate = current.replace(
        hour=run_at.hour,
        minute=run_at.minute,
        second=run_at.second,
        microsecond=0,
    )
    if candidate <= current:
        candidate += timedelta(days=1)
    return candidate


class HousekeepingScheduler:
    """Runs :func:`run_housekeeping` once a day at a fixed UTC time.

    A failed run is logged and left for the next tick; there is no immediate
    retry.
    """

    def __init__(
        self,
        run_at: time,
        session_factory: SessionFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.run_at = run_at
        self._session_factory = session_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())
            logger.info("Housekeeping scheduled daily at %s UTC", self.run_at.strftime("%H:%M"))

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    async def run_once(self) -> dict[str, int] | None:
        try:
            return await asyncio.to_thread(run_housekeeping, self._session_factory)
        except SchedulerRunFailure as exc:
            logger.warning("%s; retrying at the next scheduled run", exc.message)
            return None

    async def _run(self) -> None:
        next_tick = next_run_after(self._clock(), self.run_at)
        while not self._stopping.is_set():
            delay = max((next_tick - as_utc(self._clock())).total_seconds(), 0.0)
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=delay)
            except asyncio.TimeoutError:
                await self.run_once()
                # An early wake-up must not schedule the same tick again.
                next_tick = next_run_after(max(next_tick, as_utc(self._clock())), self.run_at)
