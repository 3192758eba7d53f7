"""Mode-weighted scoring and per-participant aggregation."""
from __future__ import annotations

from typing import List, Sequence

from .modes import DiscussionMode
from .types import Aggregate, DimensionAverages, ParticipantResult, ScoreSet

MIN_SCORE = 1.0
MAX_SCORE = 10.0


def _round1(value: float) -> float:
    """Round a float to one decimal place with stable formatting."""
    return float(f"{value:.1f}")


def _weighted(logic: float, clarity: float, relevance: float, emotional_bias: float, mode: DiscussionMode) -> float:
    w = mode.weights
    return (
        logic * w.logic
        + clarity * w.clarity
        + relevance * w.relevance
        + (MAX_SCORE - emotional_bias) * w.emotional_bias
    )


def final_score(scores: ScoreSet, mode: DiscussionMode) -> float:
    """Weighted score for one evaluation, clamped to [1, 10] and rounded to one decimal.

    Emotional bias is inverted since a calmer argument should score higher.
    """

    value = _weighted(scores.logic, scores.clarity, scores.relevance, scores.emotional_bias, mode)
    return _round1(min(MAX_SCORE, max(MIN_SCORE, value)))


def raw_average(scores: ScoreSet) -> float:
    """Unweighted mean of the four dimensions with bias inverted."""

    total = scores.logic + scores.clarity + scores.relevance + (MAX_SCORE - scores.emotional_bias)
    return _round1(total / 4)


def aggregate(score_sets: Sequence[ScoreSet], mode: DiscussionMode) -> Aggregate:
    """Average a participant's evaluations; no evaluations yields a silent zero aggregate.

    Both scores are computed from the unrounded means; only the displayed
    per-dimension averages are rounded.
    """

    if not score_sets:
        return Aggregate()
    count = len(score_sets)
    mean_set = ScoreSet(
        logic=sum(s.logic for s in score_sets) / count,
        clarity=sum(s.clarity for s in score_sets) / count,
        relevance=sum(s.relevance for s in score_sets) / count,
        emotional_bias=sum(s.emotional_bias for s in score_sets) / count,
    )
    averages = DimensionAverages(
        logic=_round1(mean_set.logic),
        clarity=_round1(mean_set.clarity),
        relevance=_round1(mean_set.relevance),
        emotional_bias=_round1(mean_set.emotional_bias),
    )
    return Aggregate(
        average_scores=averages,
        raw_average_score=raw_average(mean_set),
        average_score=final_score(mean_set, mode),
        participation_status="active",
    )


def rank(results: Sequence[ParticipantResult]) -> List[ParticipantResult]:
    """Order by weighted score descending; equal scores keep join order. Ranks start at 1."""

    ordered = sorted(results, key=lambda r: (-r.average_score, r.join_index))
    return [result.model_copy(update={"rank": index + 1}) for index, result in enumerate(ordered)]


__all__ = ["final_score", "raw_average", "aggregate", "rank"]
