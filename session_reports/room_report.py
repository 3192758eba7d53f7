from __future__ import annotations  # Build and render room report snapshots

import datetime as dt
from typing import List

from insights.analytics import participation_analytics
from rooms.models import Room
from rooms.results import compute_results

from .models import RoomReport, TranscriptEntry


def _transcript(room: Room) -> List[TranscriptEntry]:  # All arguments ordered by submission time
    entries: List[TranscriptEntry] = []
    for participant in room.participants.values():
        for response in participant.responses:
            entries.append(
                TranscriptEntry(
                    round=response.round,
                    participant_id=participant.id,
                    participant_name=participant.name,
                    transcript=response.transcript,
                    final_score=response.final_score,
                    summary=response.scores.summary or None,
                    fact_check=response.scores.fact_check or None,
                    submitted_at=response.submitted_at,
                )
            )
    entries.sort(key=lambda e: (e.submitted_at, e.round))
    return entries


def build_room_report(room: Room) -> RoomReport:  # Snapshot results, analytics and transcript
    results = compute_results(room)
    overall = f"Winner: {results[0].name}" if results else "No participants"
    return RoomReport(
        room_code=room.code,
        topic=room.topic,
        mode=room.mode,
        mode_label=room.mode.label,
        mode_weights=room.mode.weights,
        total_rounds=room.current_round,
        overall_summary=overall,
        results=results,
        analytics=participation_analytics(room),
        transcript=_transcript(room),
        generated_at=dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds"),
    )


def render_report_text(report: RoomReport) -> str:  # Plain-text export
    lines = [
        "DebAItor - Session Report",
        "=" * 40,
        f"Generated: {report.generated_at}",
        f"Room Code: {report.room_code}",
        f"Topic: {report.topic}",
        f"Mode: {report.mode_label}",
        f"Total Rounds: {report.total_rounds}",
        f"Participants: {len(report.results)}",
        f"Balance Score: {report.analytics.balance_score}/100",
        "",
    ]
    winner = report.winner
    if winner is not None:
        lines.append(f"Winner: {winner.name} (Score: {winner.average_score}/10)")
        lines.append("")
    lines.append("Final Standings")
    lines.append("-" * 40)
    for result in report.results:
        averages = result.average_scores
        lines.append(f"#{result.rank} {result.name} - Score: {result.average_score}/10 (raw {result.raw_average_score})")
        lines.append(f"   Responses: {result.arguments_submitted} ({result.participation_status})")
        lines.append(
            f"   Logic: {averages.logic} | Clarity: {averages.clarity} | "
            f"Relevance: {averages.relevance} | Bias: {averages.emotional_bias}"
        )
    lines.append("")
    lines.append("Complete Conversation Transcript")
    lines.append("-" * 40)
    current_round = None
    for entry in report.transcript:
        if entry.round != current_round:
            current_round = entry.round
            lines.append(f"--- ROUND {current_round} ---")
        lines.append(f"{entry.participant_name} - Score: {entry.final_score}/10")
        lines.append(f'  "{entry.transcript or "[No transcript available]"}"')
        if entry.summary:
            lines.append(f"  Summary: {entry.summary}")
    return "\n".join(lines) + "\n"


__all__ = ["build_room_report", "render_report_text"]
