"""Read-only participation analytics and moderator insights."""
from .analytics import balance_score, participation_analytics
from .moderator import moderator_insights
from .types import ContributorStats, Insight, ModeratorInsights, ParticipationAnalytics

__all__ = [
    "ContributorStats",
    "Insight",
    "ModeratorInsights",
    "ParticipationAnalytics",
    "balance_score",
    "moderator_insights",
    "participation_analytics",
]
