"""
Per tracking-number locking for package read-modify-write sequences.

The status engine reads a package, appends an activity and writes the new
state back. Two such sequences on the same package must not interleave, or
one update is lost. Sequences on different packages proceed in parallel.
"""

import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Iterator


class KeyedLock:
    """A re-entrant lock per key, dropped once nobody holds or waits on it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}
        self._users: Dict[str, int] = defaultdict(int)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """
        Hold the lock for ``key`` for the duration of the block.

        Usage:
            with package_locks.hold("SC1234567890"):
                ...
        """
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            self._users[key] += 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]

    def is_locked(self, key: str) -> bool:
        """True while some caller holds or waits on ``key``."""
        with self._guard:
            return key in self._locks

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
