"""Room, participant and argument models."""
from __future__ import annotations

import time
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from scoring import DiscussionMode, ScoreSet


class RoomStatus(str, Enum):
    WAITING = "waiting"
    COLLECTING = "collecting"
    EVALUATING = "evaluating"
    RESULTS = "results"


class Response(BaseModel):
    round: int = Field(ge=1)
    transcript: str
    scores: ScoreSet
    final_score: float  # display snapshot taken at submission time
    submitted_at: float = Field(default_factory=time.time)


class Participant(BaseModel):
    id: str
    name: str
    responses: List[Response] = Field(default_factory=list)
    joined_at: float = Field(default_factory=time.time)


class Room(BaseModel):
    code: str
    topic: str
    mode: DiscussionMode = DiscussionMode.DEBATE
    host_secret: str
    status: RoomStatus = RoomStatus.WAITING
    locked: bool = False
    current_round: int = Field(default=0, ge=0)
    current_turn: Optional[str] = None
    turn_order: List[str] = Field(default_factory=list)
    raised_hands: List[str] = Field(default_factory=list)
    participants: Dict[str, Participant] = Field(default_factory=dict)
    time_limit: int = 30
    turn_seq: int = 0
    turn_submitted: bool = False
    created_at: float = Field(default_factory=time.time)

    def participant_name(self, participant_id: Optional[str]) -> Optional[str]:
        if participant_id is None:
            return None
        participant = self.participants.get(participant_id)
        return participant.name if participant else None

    def join_index(self, participant_id: str) -> int:
        """Position in join order; participants no longer in the turn order sort last."""

        try:
            return self.turn_order.index(participant_id)
        except ValueError:
            return len(self.turn_order)


# Fields the store persists on the room row; the rest live in child tables
HEADER_FIELDS = (
    "topic",
    "mode",
    "host_secret",
    "status",
    "locked",
    "current_round",
    "current_turn",
    "turn_order",
    "raised_hands",
    "time_limit",
    "turn_seq",
    "turn_submitted",
    "created_at",
)


__all__ = ["HEADER_FIELDS", "Participant", "Response", "Room", "RoomStatus"]
