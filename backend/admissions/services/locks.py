"""Per-key mutual exclusion and bounded retry shared by the ledger and the favorite store.

Operations on the same key are serialized in-process by a lock keyed on that
key; operations on different keys never contend. Storage-level unique
indexes stay the source of truth across processes; these locks only keep the
check-then-write window closed inside one process.
"""
import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Hashable, Iterator, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from admissions.config import settings
from admissions.services.errors import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyedLockRegistry:
    """Hands out one lock per key; entries are dropped once no caller holds or waits on them."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, list] = {}  # key -> [lock, users]

    @contextmanager
    def hold(self, key: Hashable, timeout: float | None = None) -> Iterator[None]:
        if timeout is None:
            timeout = settings.LEDGER_LOCK_TIMEOUT_SECONDS
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        lock = entry[0]
        try:
            if not lock.acquire(timeout=timeout):
                logger.warning("Timed out after %.2fs waiting for lock on %s", timeout, key)
                raise ConflictError(str(key), attempts=1)
            try:
                yield
            finally:
                lock.release()
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


def run_with_retries(db: Session, key: str, operation: Callable[[], T]) -> T:
    """Run ``operation`` retrying on storage contention, up to LEDGER_MAX_ATTEMPTS.

    ``operation`` must be a complete unit of work that commits on success;
    after a contention failure the session is rolled back before the next try.
    """
    attempts = max(1, settings.LEDGER_MAX_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except OperationalError as exc:
            db.rollback()
            if attempt == attempts:
                logger.error("Giving up on %s after %d attempts: %s", key, attempt, exc.orig)
                raise ConflictError(key, attempts=attempt) from exc
            logger.warning("Storage contention on %s (attempt %d/%d): %s", key, attempt, attempts, exc.orig)
            time.sleep(settings.LEDGER_RETRY_BACKOFF_SECONDS * attempt)
    raise ConflictError(key, attempts=attempts)  # unreachable with attempts >= 1
