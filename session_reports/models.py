from __future__ import annotations  # Room report domain models

from typing import List, Optional

from pydantic import BaseModel, Field

from insights.types import ParticipationAnalytics
from scoring import DiscussionMode, ModeWeights, ParticipantResult


class TranscriptEntry(BaseModel):  # One scored argument in submission order
    round: int
    participant_id: str
    participant_name: str
    transcript: str
    final_score: float
    summary: Optional[str] = None
    fact_check: Optional[str] = None
    submitted_at: float


class RoomReport(BaseModel):  # Final snapshot persisted when a room ends
    room_code: str
    topic: str
    mode: DiscussionMode
    mode_label: str
    mode_weights: ModeWeights
    total_rounds: int = 0
    overall_summary: str = ""
    results: List[ParticipantResult] = Field(default_factory=list)
    analytics: ParticipationAnalytics
    transcript: List[TranscriptEntry] = Field(default_factory=list)
    generated_at: str

    @property
    def winner(self) -> Optional[ParticipantResult]:
        return self.results[0] if self.results else None


__all__ = ["RoomReport", "TranscriptEntry"]
