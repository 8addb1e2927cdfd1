"""Logging filter that masks credentials before records reach a handler."""

from __future__ import annotations

import logging
import re

SENSITIVE_PATTERN = re.compile(r"(?i)(password|secret|token|key)\S*")
MASK = "*****"


def sanitize(value: str) -> str:
    return SENSITIVE_PATTERN.sub(MASK, value)


class RedactingFilter(logging.Filter):
    """Render each record once, then mask anything that looks like a credential.

    Attach it to handlers rather than loggers so records propagated from
    third-party libraries are covered as well.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = sanitize(record.getMessage()).strip()
        record.args = None
        return True
