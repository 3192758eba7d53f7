from __future__ import annotations  # Final standings for a room

from typing import List

from scoring import ParticipantResult, aggregate, rank

from .models import Room


def compute_results(room: Room) -> List[ParticipantResult]:  # Aggregate and rank every participant
    results: List[ParticipantResult] = []
    for participant in room.participants.values():
        summary = aggregate([r.scores for r in participant.responses], room.mode)
        latest = participant.responses[-1].scores.summary if participant.responses else None
        results.append(
            ParticipantResult(
                participant_id=participant.id,
                name=participant.name,
                join_index=room.join_index(participant.id),
                arguments_submitted=len(participant.responses),
                participation_status=summary.participation_status,
                average_scores=summary.average_scores,
                raw_average_score=summary.raw_average_score,
                average_score=summary.average_score,
                summary=latest or None,
            )
        )
    return rank(results)


__all__ = ["compute_results"]
