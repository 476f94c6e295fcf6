"""
Keyed Locks

In-process mutual exclusion keyed by an arbitrary hashable (room id,
equipment id). Used only when the backing store cannot take row locks
itself, e.g. SQLite.
"""

from contextlib import contextmanager, nullcontext
from typing import Dict, Hashable
import logging
import threading

logger = logging.getLogger(__name__)


class KeyedLock:
    """
    One lock per key, created on demand and dropped when unused

    Usage:
        with room_locks.hold(room_id):
            # check-and-insert for this room
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._holders: Dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._holders[key] = self._holders.get(key, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._holders[key] -= 1
                if not self._holders[key]:
                    del self._holders[key]
                    del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


def serialize_unless_row_locking(uow, locks: KeyedLock, key: Hashable):
    """
    Context manager guarding a check-then-write on key

    Row-locking stores serialize inside the transaction themselves; the
    in-process lock is taken only when they cannot.
    """
    if uow.supports_row_locking:
        return nullcontext()
    logger.debug(f"Store has no row locks, serializing on in-process lock for {key}")
    return locks.hold(key)


# Process-wide registries
room_locks = KeyedLock()
equipment_locks = KeyedLock()
payment_locks = KeyedLock()
