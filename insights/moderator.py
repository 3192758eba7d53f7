from __future__ import annotations  # Qualitative moderator insights derived from stored scores

from typing import List, NamedTuple

from rooms.models import Room, RoomStatus

from .types import Insight, ModeratorInsights

DOMINANCE_SHARE_PCT = 50.0
LOW_RELEVANCE_BELOW = 5.0
HIGH_BIAS_ABOVE = 6.0
LOW_CLARITY_BELOW = 5.0
DISPARITY_GAP_ABOVE = 3.0


def _round1(value: float) -> float:
    return float(f"{value:.1f}")


def _fmt(value: float) -> str:  # 7.0 -> "7", 6.5 -> "6.5"
    return f"{value:g}"


class _Profile(NamedTuple):  # Per-participant rounded averages
    name: str
    count: int
    relevance: float
    clarity: float
    logic: float
    emotional_bias: float
    score: float


def _profiles(room: Room) -> List[_Profile]:
    profiles: List[_Profile] = []
    for participant in room.participants.values():
        scores = [r.scores for r in participant.responses]
        count = len(scores)
        if not count:
            profiles.append(_Profile(participant.name, 0, 0.0, 0.0, 0.0, 0.0, 0.0))
            continue
        relevance = sum(s.relevance for s in scores) / count
        clarity = sum(s.clarity for s in scores) / count
        logic = sum(s.logic for s in scores) / count
        bias = sum(s.emotional_bias for s in scores) / count
        profiles.append(
            _Profile(
                participant.name,
                count,
                _round1(relevance),
                _round1(clarity),
                _round1(logic),
                _round1(bias),
                _round1((logic + clarity + relevance + (10 - bias)) / 4),
            )
        )
    return profiles


def _group_average(values: List[float]) -> float:
    return sum(values) / len(values)


def moderator_insights(room: Room) -> ModeratorInsights:
    profiles = _profiles(room)
    if not profiles:
        return ModeratorInsights(
            room_code=room.code,
            insights=[Insight(type="info", icon="ℹ️", title="No Data", message="No participants have joined yet.")],
        )

    insights: List[Insight] = []
    total = sum(p.count for p in profiles)
    started = room.status is not RoomStatus.WAITING

    if total and len(profiles) > 1:
        for profile in profiles:
            share = profile.count / total * 100
            if share > DOMINANCE_SHARE_PCT:
                insights.append(
                    Insight(
                        type="warning",
                        icon="👑",
                        title="Dominance Detected",
                        message=(
                            f"{profile.name} contributed {round(share)}% of all arguments. "
                            "Consider encouraging others to participate more."
                        ),
                        metric=f"{round(share)}%",
                        metric_label="Share",
                    )
                )

    if total < len(profiles) and started:
        plural = "" if total == 1 else "s"
        insights.append(
            Insight(
                type="warning",
                icon="📉",
                title="Low Engagement",
                message=(
                    f"Only {total} argument{plural} submitted across {len(profiles)} participants. "
                    "Average is below 1 per person."
                ),
                metric=str(total),
                metric_label="Total Args",
            )
        )

    silent = [p.name for p in profiles if p.count == 0]
    if silent and started:
        verb = "has" if len(silent) == 1 else "have"
        insights.append(
            Insight(
                type="danger",
                icon="🔇",
                title="Silent Participants",
                message=f"{', '.join(silent)} {verb} not submitted any arguments.",
                metric=str(len(silent)),
                metric_label="Silent",
            )
        )

    active = [p for p in profiles if p.count > 0]
    if active:
        relevance = _group_average([p.relevance for p in active])
        if 0 < relevance < LOW_RELEVANCE_BELOW:
            insights.append(
                Insight(
                    type="warning",
                    icon="🎯",
                    title="Low Relevance",
                    message=(
                        f"The group's average relevance score is {_fmt(_round1(relevance))}/10. "
                        "Arguments may be drifting off-topic."
                    ),
                    metric=f"{_fmt(_round1(relevance))}/10",
                    metric_label="Avg Relevance",
                )
            )

        bias = _group_average([p.emotional_bias for p in active])
        if bias > HIGH_BIAS_ABOVE:
            insights.append(
                Insight(
                    type="warning",
                    icon="🔥",
                    title="High Emotional Bias",
                    message=(
                        f"The group's average emotional bias is {_fmt(_round1(bias))}/10. "
                        "Discussion may benefit from more objective reasoning."
                    ),
                    metric=f"{_fmt(_round1(bias))}/10",
                    metric_label="Avg Bias",
                )
            )

        clarity = _group_average([p.clarity for p in active])
        if 0 < clarity < LOW_CLARITY_BELOW:
            insights.append(
                Insight(
                    type="warning",
                    icon="💬",
                    title="Low Clarity",
                    message=(
                        f"The group's average clarity score is {_fmt(_round1(clarity))}/10. "
                        "Participants may need to articulate their points more clearly."
                    ),
                    metric=f"{_fmt(_round1(clarity))}/10",
                    metric_label="Avg Clarity",
                )
            )

        if len(active) > 1:
            top = max(active, key=lambda p: p.score)
            bottom = min(active, key=lambda p: p.score)
            gap = _round1(top.score - bottom.score)
            if gap > DISPARITY_GAP_ABOVE:
                insights.append(
                    Insight(
                        type="info",
                        icon="📊",
                        title="Score Disparity",
                        message=(
                            f"There is a {_fmt(gap)}-point gap between {top.name} ({_fmt(top.score)}) "
                            f"and {bottom.name} ({_fmt(bottom.score)}). "
                            "Consider reviewing argument quality differences."
                        ),
                        metric=_fmt(gap),
                        metric_label="Point Gap",
                    )
                )

    if not insights and total > 0:
        insights.append(
            Insight(
                type="success",
                icon="✅",
                title="Strong Discussion",
                message="No significant issues detected. The discussion appears balanced, relevant, and well-engaged.",
                metric="👍",
                metric_label="All Good",
            )
        )

    return ModeratorInsights(room_code=room.code, insights=insights)


__all__ = ["moderator_insights"]
