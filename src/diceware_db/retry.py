"""Retry SQLite operations while another connection holds a conflicting lock."""

from __future__ import annotations

import logging
import sqlite3
import time
from typing import Callable, TypeVar

from diceware_db.errors import StoreBusyError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Primary result code; the extended code carries it in the low byte.
# SQLITE_LOCKED (6) is a conflict inside this connection and is not retried.
_SQLITE_BUSY = 5

_BUSY_MESSAGES = ("database is locked", "database is busy")


def is_busy_error(error: BaseException) -> bool:
    """Check if an error is SQLITE_BUSY, a lock held by another connection (retryable)."""
    if not isinstance(error, sqlite3.OperationalError):
        return False
    code = getattr(error, "sqlite_errorcode", None)
    if code is not None:
        return code & 0xFF == _SQLITE_BUSY
    msg = str(error).lower()
    return any(pattern in msg for pattern in _BUSY_MESSAGES)


def retry_on_busy(
    operation: Callable[[], T],
    max_retries: int | None = None,
    base_delay: float = 0.001,
    max_delay: float = 0.25,
    sleep: Callable[[float], None] | None = None,
) -> T:
    """Run operation, retrying with exponential backoff while SQLite reports busy.

    Any other error propagates on the first attempt.
    max_retries=None retries until the lock clears; otherwise StoreBusyError
    is raised once max_retries retries have failed.
    """
    attempt = 0
    while True:
        try:
            return operation()
        except sqlite3.OperationalError as e:
            if not is_busy_error(e):
                raise
            if max_retries is not None and attempt >= max_retries:
                raise StoreBusyError(f"store still locked after {attempt} retries: {e}") from e
            backoff = min(max_delay, base_delay * (2 ** attempt))
            logger.debug("store busy (%s), retry %d in %.3fs", e, attempt + 1, backoff)
            (sleep or time.sleep)(backoff)
            attempt += 1


class BusyRetry:
    """Retry policy bound to a store; call it with a zero-argument operation."""

    def __init__(self, max_retries: int | None = None, base_delay: float = 0.001, max_delay: float = 0.25):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay

    def __call__(self, operation: Callable[[], T]) -> T:
        return retry_on_busy(
            operation,
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
        )
