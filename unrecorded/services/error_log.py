"""Persistent diagnostic records of failed store operations."""

from __future__ import annotations

import logging
import traceback

from sqlalchemy.orm import Session

from unrecorded.core.errors import Operation
from unrecorded.core.redaction import sanitize
from unrecorded.models import ErrorLog

logger = logging.getLogger(__name__)

RELATED_ENTITY_MAX_LENGTH = 25


def record_error(
    db: Session,
    exc: BaseException,
    operation: Operation,
    related_entity: str,
    additional_info: str | None = None,
) -> ErrorLog:
    """Append an error-log row and commit it.

    Callers pass a session that is not part of the failed unit of work, so the
    record survives the rollback of that work.
    """

    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    entry = ErrorLog(
        message=sanitize(str(exc) or type(exc).__name__),
        operation=operation,
        related_entity=related_entity[:RELATED_ENTITY_MAX_LENGTH],
        stack_trace=sanitize(stack),
        additional_info=sanitize(additional_info) if additional_info else None,
    )
    db.add(entry)
    db.commit()
    logger.debug("Recorded %s error for %s", operation.full_name.lower(), related_entity)
    return entry
