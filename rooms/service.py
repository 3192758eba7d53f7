"""Room operations.

Each operation normalises the room code, enters the room's critical section,
loads the authoritative room from the store, applies a transition from
``rooms.machine`` and writes the resulting fields back. Argument scoring is the
one slow step; it runs outside the lock between a claim and a commit.
"""
from __future__ import annotations

import logging
import secrets
import threading
from typing import Callable, List, Optional, Set, Tuple

from config import settings
from errors import ConflictError, InvalidRequestError, NotFoundError
from insights import ModeratorInsights, ParticipationAnalytics, moderator_insights, participation_analytics
from observability import log_event
from scoring import DiscussionMode, ScoreSet, final_score
from session_reports import RoomReport, build_room_report

from . import machine
from .codes import allocate_code, normalize_code
from .locks import RoomLocks
from .models import Participant, Response, Room, RoomStatus
from .store import RoomStore

logger = logging.getLogger(__name__)

Evaluator = Callable[[str, str, DiscussionMode], ScoreSet]
Transcriber = Callable[[bytes, str], str]

MAX_TOPIC_LENGTH = 500


class RoomService:
    def __init__(
        self,
        store: RoomStore,
        *,
        evaluator: Evaluator,
        transcriber: Transcriber,
        locks: Optional[RoomLocks] = None,
        code_attempts: Optional[int] = None,
        max_audio_bytes: Optional[int] = None,
    ) -> None:
        self._store = store
        self._evaluator = evaluator
        self._transcriber = transcriber
        self._locks = locks or RoomLocks()
        self._code_attempts = code_attempts or settings.ROOM_CODE_ATTEMPTS
        self._max_audio_bytes = max_audio_bytes or settings.MAX_AUDIO_BYTES
        self._inflight: Set[Tuple[str, int]] = set()
        self._inflight_guard = threading.Lock()
        self._create_guard = threading.Lock()

    @property
    def store(self) -> RoomStore:
        return self._store

    # ------------------------------------------------------------------ lifecycle

    def create_room(self, topic: str, mode: Optional[str] = None, time_limit: Optional[int] = None) -> Room:
        cleaned = (topic or "").strip()
        if not cleaned:
            raise InvalidRequestError("Topic is required")
        if len(cleaned) > MAX_TOPIC_LENGTH:
            raise InvalidRequestError(f"Topic must be at most {MAX_TOPIC_LENGTH} characters")
        limit = time_limit if time_limit is not None else settings.DEFAULT_TIME_LIMIT
        if limit < 5:
            raise InvalidRequestError("time_limit must be at least 5 seconds")
        # Allocation and insert must not interleave with another create
        with self._create_guard:
            code = allocate_code(self._store.exists, attempts=self._code_attempts)
            room = Room(
                code=code,
                topic=cleaned,
                mode=DiscussionMode.coerce(mode),
                host_secret=secrets.token_urlsafe(16),
                time_limit=limit,
            )
            self._store.create(code, room)
        log_event("room.created", code, mode=room.mode.value)
        return room

    def get_room(self, code: str) -> Room:
        return self._load(normalize_code(code))

    def join(self, code: str, name: str) -> Tuple[Room, Participant]:
        code = normalize_code(code)
        with self._locks.hold(code):
            room = self._load(code)
            participant, updates = machine.admit(room, name)
            self._store.add_participant(code, participant)
            room = self._store.update(code, **updates)
        log_event("room.joined", code, participant=participant.id, count=len(room.turn_order))
        return room, participant

    def set_lock(self, code: str, host_secret: str, locked: bool) -> Room:
        code = normalize_code(code)
        with self._locks.hold(code):
            room = self._load(code)
            machine.require_host(room, host_secret)
            room = self._store.update(code, **machine.set_locked(room, locked))
        log_event("room.locked" if room.locked else "room.unlocked", code)
        return room

    def remove_participant(self, code: str, host_secret: str, participant_id: str) -> Room:
        code = normalize_code(code)
        with self._locks.hold(code):
            room = self._load(code)
            machine.require_host(room, host_secret)
            updates = machine.remove(room, participant_id)
            self._store.remove_participant(code, participant_id)
            room = self._store.update(code, **updates)
        log_event("room.participant_removed", code, participant=participant_id, count=len(room.turn_order))
        return room

    def start(self, code: str, host_secret: str) -> Room:
        code = normalize_code(code)
        with self._locks.hold(code):
            room = self._load(code)
            machine.require_host(room, host_secret)
            room = self._store.update(code, **machine.start(room))
        log_event("room.started", code, round=room.current_round, turn=room.current_turn)
        return room

    def next_turn(self, code: str, host_secret: str) -> Room:
        code = normalize_code(code)
        with self._locks.hold(code):
            room = self._load(code)
            machine.require_host(room, host_secret)
            room = self._store.update(code, **machine.next_turn(room))
        log_event("turn.advanced", code, round=room.current_round, turn=room.current_turn)
        return room

    def assign_turn(self, code: str, host_secret: str, participant_id: str) -> Room:
        code = normalize_code(code)
        with self._locks.hold(code):
            room = self._load(code)
            machine.require_host(room, host_secret)
            room = self._apply(code, room, machine.assign_turn(room, participant_id))
        log_event("turn.assigned", code, round=room.current_round, turn=room.current_turn)
        return room

    def raise_hand(self, code: str, participant_id: str) -> Room:
        code = normalize_code(code)
        with self._locks.hold(code):
            room = self._load(code)
            room = self._apply(code, room, machine.raise_hand(room, participant_id))
        return room

    def lower_hand(self, code: str, participant_id: str) -> Room:
        code = normalize_code(code)
        with self._locks.hold(code):
            room = self._load(code)
            room = self._apply(code, room, machine.lower_hand(room, participant_id))
        return room

    def end(self, code: str, host_secret: str) -> RoomReport:
        """Close the room, snapshot standings and analytics, and move to results."""

        code = normalize_code(code)
        with self._locks.hold(code):
            room = self._load(code)
            machine.require_host(room, host_secret)
            room = self._store.update(code, **machine.begin_end(room))
            report = build_room_report(room)
            self._store.save_report(code, report)
            self._store.update(code, status=RoomStatus.RESULTS)
        winner = report.winner
        log_event(
            "room.ended",
            code,
            round=report.total_rounds,
            count=len(report.results),
            score=winner.average_score if winner else None,
        )
        return report

    # ---------------------------------------------------------------- submission

    def submit(
        self,
        code: str,
        participant_id: str,
        *,
        transcript: Optional[str] = None,
        audio: Optional[bytes] = None,
        filename: str = "audio.webm",
    ) -> Response:
        """Accept at most one scored argument for the current turn.

        The turn is claimed under the room lock, scored without it, and committed
        only if the turn version is unchanged. A second submission for the same
        turn while the first is being scored is rejected.
        """

        code = normalize_code(code)
        self._check_payload(transcript, audio)
        with self._locks.hold(code):
            room = self._load(code)
            turn_seq = machine.claim_turn(room, participant_id)
            claim = (code, turn_seq)
            with self._inflight_guard:
                if claim in self._inflight:
                    raise ConflictError("An argument for this turn is already being scored")
                self._inflight.add(claim)
        try:
            text = self._resolve_transcript(transcript, audio, filename)
            scores = self._evaluator(room.topic, text, room.mode)
            with self._locks.hold(code):
                current = self._load(code)
                updates = machine.commit_submission(current, participant_id, turn_seq)
                response = Response(
                    round=max(current.current_round, 1),
                    transcript=text,
                    scores=scores,
                    final_score=final_score(scores, current.mode),
                )
                self._store.add_response(code, participant_id, response)
                self._store.update(code, **updates)
        finally:
            with self._inflight_guard:
                self._inflight.discard(claim)
        log_event(
            "argument.accepted",
            code,
            participant=participant_id,
            round=response.round,
            score=response.final_score,
        )
        return response

    def _check_payload(self, transcript: Optional[str], audio: Optional[bytes]) -> None:
        if audio:
            if len(audio) > self._max_audio_bytes:
                raise InvalidRequestError(f"Audio exceeds {self._max_audio_bytes} bytes")
            return
        if transcript is None or not transcript.strip():
            raise InvalidRequestError("Either an audio file or a transcript is required")

    def _resolve_transcript(self, transcript: Optional[str], audio: Optional[bytes], filename: str) -> str:
        if audio:
            text = self._transcriber(audio, filename).strip()
            if not text:
                raise InvalidRequestError("No speech detected in the recording")
            return text
        return (transcript or "").strip()

    # ------------------------------------------------------------------- queries

    def turn_status(self, code: str, participant_id: Optional[str] = None) -> Room:
        room = self._load(normalize_code(code))
        if participant_id:
            machine.require_participant(room, participant_id)
        return room

    def results(self, code: str) -> RoomReport:
        code = normalize_code(code)
        room = self._load(code)
        if room.status is not RoomStatus.RESULTS:
            raise ConflictError("Debate has not ended yet")
        report = self._store.get_report(code)
        if report is None:
            logger.warning("Report snapshot missing for %s; rebuilding from room state", code)
            report = build_room_report(room)
        return report

    def analytics(self, code: str) -> ParticipationAnalytics:
        return participation_analytics(self._load(normalize_code(code)))

    def insights(self, code: str) -> ModeratorInsights:
        return moderator_insights(self._load(normalize_code(code)))

    def participants(self, code: str) -> List[Participant]:
        code = normalize_code(code)
        self._load(code)
        return self._store.list_participants(code)

    # ------------------------------------------------------------------- helpers

    def _load(self, code: str) -> Room:
        room = self._store.get(code)
        if room is None:
            raise NotFoundError(f"Room {code} not found")
        return room

    def _apply(self, code: str, room: Room, updates: machine.Updates) -> Room:
        if not updates:
            return room
        return self._store.update(code, **updates)


__all__ = ["Evaluator", "RoomService", "Transcriber"]
