from __future__ import annotations  # Process-wide interview session registry

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from errors import NotFoundError

from .models import InterviewSession


class SessionRegistry:
    """Sessions keyed by id, each guarded by its own lock.

    Entries live until ``delete`` is called; there is no expiry.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, InterviewSession] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def add(self, session: InterviewSession) -> None:
        with self._guard:
            if session.id in self._sessions:
                raise KeyError(f"Session already registered: {session.id}")
            self._sessions[session.id] = session
            self._locks[session.id] = threading.Lock()

    def get(self, session_id: str) -> InterviewSession:
        with self._guard:
            session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("Interview session not found")
        return session

    def find(self, session_id: str) -> Optional[InterviewSession]:
        with self._guard:
            return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        with self._guard:
            self._locks.pop(session_id, None)
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

    @contextmanager
    def hold(self, session_id: str) -> Iterator[InterviewSession]:
        """Yield the live session under its lock; mutations inside are atomic per session."""

        with self._guard:
            lock = self._locks.get(session_id)
        if lock is None:
            raise NotFoundError("Interview session not found")
        with lock:
            yield self.get(session_id)


__all__ = ["SessionRegistry"]
