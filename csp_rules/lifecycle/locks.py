"""
Per-policy mutual exclusion.

Lifecycle events for the same owner policy must not reconcile
concurrently. Entries exist only while a key is held or awaited.
"""

from contextlib import contextmanager
from threading import Lock
from typing import Iterator


class _KeyedLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = Lock()
        self.users = 0


class PolicyLocks:
    """Keyed lock map. Thread-safe."""

    def __init__(self):
        self._locks: dict[str, _KeyedLock] = {}
        self._guard = Lock()

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the lock of `key` for the duration of the block."""
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyedLock()
            entry.users += 1

        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def active_keys(self) -> frozenset[str]:
        """Keys currently held or awaited."""
        with self._guard:
            return frozenset(self._locks)
