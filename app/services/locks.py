"""Per-event mutual exclusion for the capacity ledger.

One lock per event id, created on first use and dropped once no caller holds
or waits on it. Work on different events never contends. This only
serializes within a process; cross-process exclusion comes from the row lock
taken in capacity_ledger (SELECT ... FOR UPDATE).
"""
import logging
import threading
import uuid
import weakref
from contextlib import contextmanager
from typing import Iterator, Optional

from app.config import settings
from app.services.errors import LedgerBusyError

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
# Entries live only while some caller references the lock
_event_locks: "weakref.WeakValueDictionary[uuid.UUID, threading.Lock]" = weakref.WeakValueDictionary()


def _lock_for(event_id: uuid.UUID) -> threading.Lock:
    with _registry_lock:
        lock = _event_locks.get(event_id)
        if lock is None:
            lock = threading.Lock()
            _event_locks[event_id] = lock
        return lock


@contextmanager
def event_lock(event_id: uuid.UUID, timeout: Optional[float] = None) -> Iterator[None]:
    """Hold the exclusive lock for one event, or raise LedgerBusyError after `timeout` seconds."""
    if timeout is None:
        timeout = settings.LEDGER_LOCK_TIMEOUT_SECONDS
    lock = _lock_for(event_id)
    if not lock.acquire(timeout=timeout):
        logger.warning("Timed out after %.1fs waiting for lock on event %s", timeout, event_id)
        raise LedgerBusyError(event_id)
    try:
        yield
    finally:
        lock.release()
