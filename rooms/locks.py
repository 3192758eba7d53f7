from __future__ import annotations  # Per-room mutual exclusion

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class RoomLocks:  # Process-wide registry of one lock per room code
    def __init__(self) -> None:
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, code: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(code)
            if lock is None:
                lock = threading.Lock()
                self._locks[code] = lock
        return lock

    @contextmanager
    def hold(self, code: str) -> Iterator[None]:
        with self.lock_for(code):
            yield


__all__ = ["RoomLocks"]
