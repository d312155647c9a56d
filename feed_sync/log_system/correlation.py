"""Correlation ids for log records.

Each sync attempt runs under its own correlation id so that interleaved log
lines from concurrent syncs can be told apart.
"""

import logging
import uuid
from contextvars import ContextVar, Token
from typing import Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar("feed_sync_correlation_id", default=None)


def generate_correlation_id(prefix: str = "sync") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> Token:
    """Bind a correlation id to the current context.

    Returns:
        Token to pass to reset_correlation_id
    """
    return _correlation_id.set(correlation_id)


def reset_correlation_id(token: Token) -> None:
    _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Adds the current correlation id to every record as correlation_id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True
