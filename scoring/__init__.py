"""Scoring engine for discussion room arguments."""
from .engine import aggregate, final_score, rank, raw_average
from .modes import DiscussionMode
from .types import Aggregate, DimensionAverages, ModeWeights, ParticipantResult, ScoreSet

__all__ = [
    "Aggregate",
    "DimensionAverages",
    "DiscussionMode",
    "ModeWeights",
    "ParticipantResult",
    "ScoreSet",
    "aggregate",
    "final_score",
    "rank",
    "raw_average",
]
