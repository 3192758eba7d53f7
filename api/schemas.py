"""Pydantic schemas for the room and interview APIs."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from rooms.models import Response, Room, RoomStatus
from scoring import DiscussionMode, ModeWeights, ScoreSet, raw_average


class CreateRoomReq(BaseModel):
    topic: str
    mode: Optional[str] = None
    time_limit: Optional[int] = None


class JoinReq(BaseModel):
    name: str


class HostReq(BaseModel):
    host_secret: str


class LockReq(HostReq):
    locked: bool = True


class HostParticipantReq(HostReq):
    participant_id: str


class ParticipantReq(BaseModel):
    participant_id: str


class InterviewStartReq(BaseModel):
    role: str
    focus: Optional[str] = None
    difficulty: Optional[str] = None
    stream: bool = False


class InterviewReportReq(BaseModel):
    session_id: str


class TtsReq(BaseModel):
    text: str


class ParticipantView(BaseModel):
    id: str
    name: str
    responses: int
    is_current_turn: bool
    hand_raised: bool


class RoomView(BaseModel):
    """Public room state; the host secret is never included."""

    code: str
    topic: str
    mode: DiscussionMode
    mode_label: str
    mode_weights: ModeWeights
    time_limit: int
    status: RoomStatus
    locked: bool
    current_round: int
    current_turn: Optional[str] = None
    current_turn_name: Optional[str] = None
    participants: List[ParticipantView] = Field(default_factory=list)
    turn_order: List[str] = Field(default_factory=list)
    raised_hands: List[str] = Field(default_factory=list)

    @classmethod
    def from_room(cls, room: Room) -> "RoomView":
        participants = [
            ParticipantView(
                id=pid,
                name=p.name,
                responses=len(p.responses),
                is_current_turn=room.current_turn == pid,
                hand_raised=pid in room.raised_hands,
            )
            for pid, p in room.participants.items()
        ]
        return cls(
            code=room.code,
            topic=room.topic,
            mode=room.mode,
            mode_label=room.mode.label,
            mode_weights=room.mode.weights,
            time_limit=room.time_limit,
            status=room.status,
            locked=room.locked,
            current_round=room.current_round,
            current_turn=room.current_turn,
            current_turn_name=room.participant_name(room.current_turn),
            participants=participants,
            turn_order=list(room.turn_order),
            raised_hands=list(room.raised_hands),
        )


class RoomCreatedResp(BaseModel):
    code: str
    host_secret: str
    topic: str
    mode: DiscussionMode
    mode_label: str
    time_limit: int


class JoinResp(BaseModel):
    participant_id: str
    name: str
    room: RoomView


class TurnStatusResp(BaseModel):
    status: RoomStatus
    round: int
    is_my_turn: bool
    has_submitted: bool
    hand_raised: bool
    current_turn: Optional[str] = None
    current_turn_name: Optional[str] = None
    mode: DiscussionMode
    time_limit: int

    @classmethod
    def from_room(cls, room: Room, participant_id: Optional[str]) -> "TurnStatusResp":
        is_my_turn = participant_id is not None and room.current_turn == participant_id
        return cls(
            status=room.status,
            round=room.current_round,
            is_my_turn=is_my_turn,
            has_submitted=is_my_turn and room.turn_submitted,
            hand_raised=participant_id in room.raised_hands if participant_id else False,
            current_turn=room.current_turn,
            current_turn_name=room.participant_name(room.current_turn),
            mode=room.mode,
            time_limit=room.time_limit,
        )


class SubmitResp(BaseModel):
    round: int
    transcript: str
    scores: ScoreSet
    final_score: float
    raw_score: float

    @classmethod
    def from_response(cls, response: Response) -> "SubmitResp":
        return cls(
            round=response.round,
            transcript=response.transcript,
            scores=response.scores,
            final_score=response.final_score,
            raw_score=raw_average(response.scores),
        )


class HealthResp(BaseModel):
    status: str = "ok"
    ai_enabled: bool
    persistence_enabled: bool
