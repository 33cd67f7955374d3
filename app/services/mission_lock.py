"""
Per-user exclusive lock around the "create today's missions" transaction.

PostgreSQL uses a transaction-scoped advisory lock, released by the commit or
rollback that ends the transaction. Other dialects (SQLite for development and
tests) fall back to a process-local lock per user, released when the block
exits; callers commit inside the block.
"""
import hashlib
import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.log import get_logger

logger = get_logger(__name__)

LOCK_NAMESPACE = "missions"


class MissionLockTimeout(Exception):
    """The per-user lock could not be obtained in time; the caller may retry."""

    def __init__(self, user_id: int, timeout_ms: int):
        super().__init__(f"mission lock for user {user_id} not acquired within {timeout_ms}ms")
        self.user_id = user_id
        self.timeout_ms = timeout_ms


def lock_key(user_id: int) -> int:
    """Stable signed 64-bit key for pg_advisory_xact_lock."""
    digest = hashlib.blake2b(f"{LOCK_NAMESPACE}:{user_id}".encode(), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


class _LocalLocks:
    """Process-local lock registry keyed by user id."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def get(self, user_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock


_local_locks = _LocalLocks()


@contextmanager
def user_transaction_lock(db: Session, user_id: int, timeout_ms: int) -> Iterator[None]:
    """Hold the exclusive mission lock of `user_id` for the current transaction."""
    if db.get_bind().dialect.name == "postgresql":
        # SET LOCAL does not accept bind parameters
        db.execute(text(f"SET LOCAL lock_timeout = '{int(timeout_ms)}ms'"))
        try:
            db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": lock_key(user_id)})
        except OperationalError as e:
            db.rollback()
            logger.warning("event=mission_lock.timeout | user_id=%s | timeout_ms=%s", user_id, timeout_ms)
            raise MissionLockTimeout(user_id, timeout_ms) from e
        yield
        return

    lock = _local_locks.get(user_id)
    if not lock.acquire(timeout=timeout_ms / 1000):
        logger.warning("event=mission_lock.timeout | user_id=%s | timeout_ms=%s", user_id, timeout_ms)
        raise MissionLockTimeout(user_id, timeout_ms)
    try:
        yield
    finally:
        lock.release()
