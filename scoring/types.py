"""Shared score models."""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ParticipationStatus = Literal["active", "silent"]


class ScoreSet(BaseModel):
    """Evaluation of a single argument; every dimension sits in [1, 10]."""

    logic: float = Field(ge=1, le=10)
    clarity: float = Field(ge=1, le=10)
    relevance: float = Field(ge=1, le=10)
    emotional_bias: float = Field(ge=1, le=10)
    summary: str = ""
    fact_check: str = ""
    roast: str = ""


class ModeWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    logic: float
    clarity: float
    relevance: float
    emotional_bias: float

    def total(self) -> float:
        return self.logic + self.clarity + self.relevance + self.emotional_bias


class DimensionAverages(BaseModel):
    logic: float = 0.0
    clarity: float = 0.0
    relevance: float = 0.0
    emotional_bias: float = 0.0


class Aggregate(BaseModel):
    average_scores: DimensionAverages = Field(default_factory=DimensionAverages)
    raw_average_score: float = 0.0
    average_score: float = 0.0
    participation_status: ParticipationStatus = "silent"


class ParticipantResult(BaseModel):
    participant_id: str
    name: str
    join_index: int = 0
    arguments_submitted: int = 0
    participation_status: ParticipationStatus = "silent"
    average_scores: DimensionAverages = Field(default_factory=DimensionAverages)
    raw_average_score: float = 0.0
    average_score: float = 0.0
    summary: Optional[str] = None
    rank: int = 0
