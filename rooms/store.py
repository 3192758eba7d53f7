from __future__ import annotations  # Two-tier room store: in-process cache over an optional durable backend

import logging
import sqlite3
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol, TypeVar

from session_reports.models import RoomReport

from .models import HEADER_FIELDS, Participant, Response, Room

logger = logging.getLogger(__name__)

R = TypeVar("R")

# Failures of the durable tier that are logged and swallowed
BACKEND_ERRORS = (sqlite3.Error, OSError)


class RoomBackend(Protocol):  # Durable tier contract
    def room_exists(self, code: str) -> bool: ...

    def save_room(self, room: Room) -> None: ...

    def insert_participant(self, code: str, participant: Participant) -> None: ...

    def delete_participant(self, code: str, participant_id: str) -> None: ...

    def insert_argument(self, code: str, participant_id: str, response: Response) -> Any: ...

    def load_room(self, code: str) -> Optional[Room]: ...

    def save_report(self, code: str, report_json: str) -> None: ...

    def load_report(self, code: str) -> Optional[str]: ...


class RoomStore:
    """Cache-first room state with write-through, best-effort persistence.

    The cache is authoritative for reads within the process. Every mutation is
    applied to the cache first and then written to the backend; a backend failure
    is logged and the in-memory mutation stands. Without a backend the store runs
    memory-only and rooms are lost on restart.
    """

    def __init__(self, backend: Optional[RoomBackend] = None) -> None:
        self._backend = backend
        self._rooms: Dict[str, Room] = {}
        self._reports: Dict[str, RoomReport] = {}
        self._guard = threading.Lock()
        if backend is None:
            logger.warning("Room store is memory-only; rooms will not survive a restart")

    @property
    def persistent(self) -> bool:
        return self._backend is not None

    def exists(self, code: str) -> bool:
        with self._guard:
            if code in self._rooms:
                return True
        if self._backend is None:
            return False
        # A backend read failure counts as "taken" so allocation resamples
        found = self._persist("exists", code, lambda b: b.room_exists(code))
        return True if found is None else bool(found)

    def get(self, code: str) -> Optional[Room]:
        with self._guard:
            cached = self._rooms.get(code)
            if cached is not None:
                return cached.model_copy(deep=True)
        if self._backend is None:
            return None
        loaded = self._persist("load", code, lambda b: b.load_room(code))
        if loaded is None:
            return None
        with self._guard:
            room = self._rooms.setdefault(code, loaded)
            return room.model_copy(deep=True)

    def create(self, code: str, room: Room) -> Room:
        with self._guard:
            if code in self._rooms:
                raise KeyError(f"Room already cached: {code}")
            self._rooms[code] = room.model_copy(deep=True)
        self._persist("create", code, lambda b: b.save_room(room))
        return room

    def update(self, code: str, **fields: Any) -> Room:
        """Apply header field changes and write the room row through."""

        unknown = set(fields) - set(HEADER_FIELDS)
        if unknown:
            raise ValueError(f"Not updatable through update(): {sorted(unknown)}")
        with self._guard:
            room = self._cached(code)
            for key, value in fields.items():
                setattr(room, key, value)
            snapshot = room.model_copy(deep=True)
        self._persist("update", code, lambda b: b.save_room(snapshot))
        return snapshot

    def add_participant(self, code: str, participant: Participant) -> None:
        with self._guard:
            self._cached(code).participants[participant.id] = participant.model_copy(deep=True)
        self._persist("add_participant", code, lambda b: b.insert_participant(code, participant))

    def remove_participant(self, code: str, participant_id: str) -> None:
        with self._guard:
            self._cached(code).participants.pop(participant_id, None)
        self._persist("remove_participant", code, lambda b: b.delete_participant(code, participant_id))

    def add_response(self, code: str, participant_id: str, response: Response) -> None:
        with self._guard:
            participant = self._cached(code).participants.get(participant_id)
            if participant is None:
                raise KeyError(f"Unknown participant {participant_id} in room {code}")
            participant.responses.append(response.model_copy(deep=True))
        self._persist("add_response", code, lambda b: b.insert_argument(code, participant_id, response))

    def list_participants(self, code: str) -> List[Participant]:
        room = self.get(code)
        return list(room.participants.values()) if room else []

    def save_report(self, code: str, report: RoomReport) -> None:
        with self._guard:
            self._reports[code] = report.model_copy(deep=True)
        payload = report.model_dump_json()
        self._persist("save_report", code, lambda b: b.save_report(code, payload))

    def get_report(self, code: str) -> Optional[RoomReport]:
        with self._guard:
            cached = self._reports.get(code)
            if cached is not None:
                return cached.model_copy(deep=True)
        if self._backend is None:
            return None
        raw = self._persist("load_report", code, lambda b: b.load_report(code))
        if raw is None:
            return None
        report = RoomReport.model_validate_json(raw)
        with self._guard:
            self._reports.setdefault(code, report)
        return report

    def _cached(self, code: str) -> Room:  # Caller holds the guard
        room = self._rooms.get(code)
        if room is None:
            raise KeyError(f"Room not loaded: {code}")
        return room

    def _persist(self, action: str, code: str, fn: Callable[[RoomBackend], R]) -> Optional[R]:
        if self._backend is None:
            return None
        try:
            return fn(self._backend)
        except BACKEND_ERRORS as exc:
            logger.warning("Room backend %s failed for %s; write not guaranteed: %s", action, code, exc)
            return None


__all__ = ["BACKEND_ERRORS", "RoomBackend", "RoomStore"]
