# backend/provider_calendar/services/slots/locks.py
"""
Per-provider serialization of the booking commit path.

Slot browsing never locks. Creating a booking holds the provider's lock
from the authoritative re-check until the insert is committed, so two
requests for the same provider cannot both pass a stale conflict check.

With Redis configured the lock is a Redis lock shared by every worker
process; without it, a threading.Lock per provider in this process.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from redis import Redis
from redis.exceptions import LockError

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = "lock:booking"
LOCK_TIMEOUT_SECONDS = 10
LOCK_WAIT_SECONDS = 5


class ProviderBusyError(RuntimeError):
    """Could not acquire the provider's commit lock in time."""


_local_locks: dict[int, threading.Lock] = {}
_local_locks_guard = threading.Lock()


def _local_lock(provider_id: int) -> threading.Lock:
    with _local_locks_guard:
        lock = _local_locks.get(provider_id)
        if lock is None:
            lock = _local_locks[provider_id] = threading.Lock()
        return lock


@contextmanager
def provider_commit_lock(provider_id: int, redis: Redis | None = None) -> Iterator[None]:
    """Hold the commit lock of one provider."""
    if redis is None:
        lock = _local_lock(provider_id)
        if not lock.acquire(timeout=LOCK_WAIT_SECONDS):
            raise ProviderBusyError(f"Provider {provider_id} is busy, retry")
        try:
            yield
        finally:
            lock.release()
        return

    lock = redis.lock(
        f"{LOCK_KEY_PREFIX}:{provider_id}",
        timeout=LOCK_TIMEOUT_SECONDS,
        blocking_timeout=LOCK_WAIT_SECONDS,
    )
    if not lock.acquire():
        raise ProviderBusyError(f"Provider {provider_id} is busy, retry")
    try:
        yield
    finally:
        try:
            lock.release()
        except LockError:
            logger.warning(
                "Commit lock for provider=%s expired before release", provider_id
            )
