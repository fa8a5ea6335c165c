"""
Per-Key Locking
===============

KeyedLocks hands out one lock per key so that work on unrelated keys never
serializes behind a single global lock. Locks exist only while some thread
holds or waits on them.

Usage:
    locks = KeyedLocks()
    with locks.hold("some-key"):
        ...  # at most one thread per key in here
"""

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator


class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    """
    Mutual exclusion scoped to individual keys.

    Each entry counts the threads holding or waiting on it and is dropped
    when that count returns to zero. Locks are not reentrant: a thread that
    re-enters ``hold()`` for a key it already holds blocks forever.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, _KeyLock] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.users += 1

        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        """Number of keys with a live lock."""
        with self._guard:
            return len(self._locks)

    def __contains__(self, key: Hashable) -> bool:
        with self._guard:
            return key in self._locks
