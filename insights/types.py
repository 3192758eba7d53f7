"""Analytics and insight record models."""
from typing import List, Literal

from pydantic import BaseModel, Field

ContributionStatus = Literal["zero", "low", "active"]
InsightType = Literal["warning", "danger", "info", "success"]


class ContributorStats(BaseModel):
    participant_id: str
    name: str
    argument_count: int = 0
    contribution_pct: float = 0.0
    status: ContributionStatus = "zero"


class ParticipationAnalytics(BaseModel):
    room_code: str
    topic: str
    total_participants: int = 0
    total_arguments: int = 0
    total_rounds: int = 0
    average_args_per_person: float = 0.0
    balance_score: int = 0
    participants: List[ContributorStats] = Field(default_factory=list)
    low_contributors: List[str] = Field(default_factory=list)
    zero_contributors: List[str] = Field(default_factory=list)


class Insight(BaseModel):
    type: InsightType
    icon: str
    title: str
    message: str
    metric: str = ""
    metric_label: str = ""


class ModeratorInsights(BaseModel):
    room_code: str
    insights: List[Insight] = Field(default_factory=list)
