"""Translate domain errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from unrecorded.core.errors import DomainError, Operation
from unrecorded.services.error_log import record_error

logger = logging.getLogger(__name__)


def _error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": status_code})


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.message, exc.status_code)


def _related_entity(path: str) -> str:
    segments = [segment for segment in path.split("/") if segment]
    if segments and segments[0] == "api":
        segments = segments[1:]
    return segments[0] if segments else "root"


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log, persist an error-log row in a fresh session and answer 500."""

    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    session_factory = request.app.state.session_factory
    try:
        with session_factory() as db:
            record_error(
                db,
                exc,
                Operation.GENERAL,
                _related_entity(request.url.path),
                f"{request.method} {request.url.path}",
            )
    except SQLAlchemyError:
        logger.exception("Could not record unhandled error")
    return _error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
