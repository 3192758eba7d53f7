"""Room lifecycle transitions.

Every function here takes the authoritative ``Room`` read inside the room's
critical section, checks preconditions, and returns the header fields to write
back. Nothing in this module touches the store.
"""
from __future__ import annotations

import secrets
import uuid
from typing import Any, Dict, List, Optional, Tuple

from errors import ConflictError, InvalidRequestError, NotFoundError, UnauthorizedError

from .models import Participant, Room, RoomStatus

Updates = Dict[str, Any]

MAX_NAME_LENGTH = 60


def require_host(room: Room, host_secret: Optional[str]) -> None:
    if not host_secret or not secrets.compare_digest(room.host_secret.encode("utf-8"), host_secret.encode("utf-8")):
        raise UnauthorizedError("Only the host can perform this action")


def require_participant(room: Room, participant_id: Optional[str]) -> Participant:
    if not participant_id:
        raise InvalidRequestError("participant_id is required")
    participant = room.participants.get(participant_id)
    if participant is None:
        raise NotFoundError(f"Participant {participant_id} not found in room {room.code}")
    return participant


def _require_collecting(room: Room, action: str) -> None:
    if room.status is not RoomStatus.COLLECTING:
        raise ConflictError(f"Cannot {action} while the room is {room.status.value}")


def _turn_change(room: Room, holder: Optional[str], **extra: Any) -> Updates:
    """Move the turn to ``holder``; bumps the turn version and drops the holder's raised hand."""

    updates: Updates = {
        "current_turn": holder,
        "turn_seq": room.turn_seq + 1,
        "turn_submitted": False,
    }
    if holder is not None and holder in room.raised_hands:
        updates["raised_hands"] = [pid for pid in room.raised_hands if pid != holder]
    updates.update(extra)
    return updates


def admit(room: Room, name: str) -> Tuple[Participant, Updates]:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidRequestError("Name is required")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise InvalidRequestError(f"Name must be at most {MAX_NAME_LENGTH} characters")
    if room.status in (RoomStatus.EVALUATING, RoomStatus.RESULTS):
        raise ConflictError("This room has already ended")
    if room.locked:
        raise ConflictError("Room is locked. The host is not accepting new participants.")
    participant = Participant(id=uuid.uuid4().hex, name=cleaned)
    return participant, {"turn_order": room.turn_order + [participant.id]}


def set_locked(room: Room, locked: bool) -> Updates:
    return {"locked": bool(locked)}


def start(room: Room) -> Updates:
    if room.status is not RoomStatus.WAITING:
        raise ConflictError(f"Room has already started (status {room.status.value})")
    if not room.turn_order:
        raise ConflictError("No participants have joined yet")
    return _turn_change(room, room.turn_order[0], status=RoomStatus.COLLECTING, current_round=1)


def next_turn(room: Room) -> Updates:
    _require_collecting(room, "advance the turn")
    if not room.turn_order:
        raise ConflictError("No participants left in the turn order")
    if room.current_turn in room.turn_order:
        next_index = room.turn_order.index(room.current_turn) + 1
    else:
        next_index = 0
    round_number = room.current_round
    if next_index >= len(room.turn_order):
        next_index = 0
        round_number += 1
    return _turn_change(room, room.turn_order[next_index], current_round=round_number)


def assign_turn(room: Room, participant_id: str) -> Updates:
    _require_collecting(room, "assign a turn")
    require_participant(room, participant_id)
    if participant_id == room.current_turn:
        return {}
    return _turn_change(room, participant_id)


def raise_hand(room: Room, participant_id: str) -> Updates:
    _require_collecting(room, "raise a hand")
    require_participant(room, participant_id)
    if participant_id in room.raised_hands:
        return {}
    return {"raised_hands": room.raised_hands + [participant_id]}


def lower_hand(room: Room, participant_id: str) -> Updates:
    require_participant(room, participant_id)
    if participant_id not in room.raised_hands:
        return {}
    return {"raised_hands": [pid for pid in room.raised_hands if pid != participant_id]}


def remove(room: Room, participant_id: str) -> Updates:
    require_participant(room, participant_id)
    remaining: List[str] = [pid for pid in room.turn_order if pid != participant_id]
    hands = [pid for pid in room.raised_hands if pid != participant_id]
    updates: Updates = {"turn_order": remaining}
    if room.current_turn == participant_id:
        holder = remaining[0] if remaining else None
        updates.update(_turn_change(room, holder))
        hands = [pid for pid in hands if pid != holder]
    updates["raised_hands"] = hands
    return updates


def claim_turn(room: Room, participant_id: str) -> int:
    """Check that ``participant_id`` may submit now and return the turn version it claims."""

    require_participant(room, participant_id)
    _require_collecting(room, "submit")
    if room.current_turn != participant_id:
        raise ConflictError("Not your turn")
    if room.turn_submitted:
        raise ConflictError("An argument was already submitted for this turn")
    return room.turn_seq


def commit_submission(room: Room, participant_id: str, turn_seq: int) -> Updates:
    """Re-validate a claim after evaluation; the turn must not have moved in between."""

    if room.status is not RoomStatus.COLLECTING or room.turn_seq != turn_seq:
        raise ConflictError("The turn ended before the argument was scored")
    if room.current_turn != participant_id:
        raise ConflictError("Not your turn")
    if room.turn_submitted:
        raise ConflictError("An argument was already submitted for this turn")
    return {"turn_submitted": True}


def begin_end(room: Room) -> Updates:
    if room.status is RoomStatus.RESULTS:
        raise ConflictError("Room has already ended")
    return {"status": RoomStatus.EVALUATING, "current_turn": None, "turn_seq": room.turn_seq + 1}


__all__ = [
    "admit",
    "assign_turn",
    "begin_end",
    "claim_turn",
    "commit_submission",
    "lower_hand",
    "next_turn",
    "raise_hand",
    "remove",
    "require_host",
    "require_participant",
    "set_locked",
    "start",
]
