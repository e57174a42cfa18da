"""
Per-key mutual exclusion.

One lock per request id, created on demand and dropped once nobody
holds or waits for it. Cross-instance safety comes from the
repository's version check; this only avoids wasted retries in-process.
"""

import threading
from contextlib import contextmanager
from typing import Iterator

from src.core.errors import ConcurrentModification


class KeyedLocks:

    def __init__(self, timeout_seconds: float = 30.0):
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}   # key -> [lock, users]
        self._timeout = timeout_seconds

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        lock = entry[0]
        acquired = lock.acquire(timeout=self._timeout)
        try:
            if not acquired:
                raise ConcurrentModification(key)
            yield
        finally:
            if acquired:
                lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
