"""Participation analytics over a room's submitted arguments."""
from __future__ import annotations

import math
from typing import List, Sequence

from rooms.models import Room

from .types import ContributorStats, ParticipationAnalytics


def _round1(value: float) -> float:
    return float(f"{value:.1f}")


def balance_score(counts: Sequence[int]) -> int:
    """0-100 evenness of contributions, 100 meaning perfectly even.

    Computed as ``100 - 100 * min(cv, 1)`` with the population coefficient of
    variation. No submissions scores 0; a single participant scores 100.
    """

    total = sum(counts)
    if total == 0:
        return 0
    if len(counts) <= 1:
        return 100
    mean = total / len(counts)
    variance = sum((count - mean) ** 2 for count in counts) / len(counts)
    cv = min(math.sqrt(variance) / mean, 1.0)
    return int(round((1 - cv) * 100))


def participation_analytics(room: Room) -> ParticipationAnalytics:
    participants = list(room.participants.values())
    if not participants:
        return ParticipationAnalytics(room_code=room.code, topic=room.topic, total_rounds=room.current_round)

    counts = [len(p.responses) for p in participants]
    total = sum(counts)
    average = _round1(total / len(participants))

    stats: List[ContributorStats] = []
    for participant, count in zip(participants, counts):
        if count == 0:
            status = "zero"
        elif count < average:
            status = "low"
        else:
            status = "active"
        stats.append(
            ContributorStats(
                participant_id=participant.id,
                name=participant.name,
                argument_count=count,
                contribution_pct=_round1(count / total * 100) if total else 0.0,
                status=status,
            )
        )
    stats.sort(key=lambda s: s.argument_count, reverse=True)

    return ParticipationAnalytics(
        room_code=room.code,
        topic=room.topic,
        total_participants=len(participants),
        total_arguments=total,
        total_rounds=room.current_round,
        average_args_per_person=average,
        balance_score=balance_score(counts),
        participants=stats,
        low_contributors=[s.name for s in stats if s.status == "low"],
        zero_contributors=[s.name for s in stats if s.status == "zero"],
    )


__all__ = ["balance_score", "participation_analytics"]
