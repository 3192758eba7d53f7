"""AI interview sessions: conversation window, prompts, evaluation and service."""
from .collaborators import InterviewAI, interview_ai_with_config
from .engine import MAX_QUESTIONS, RECENT_WINDOW
from .evaluator import InterviewEvaluation, InterviewScores, mock_evaluation, parse_evaluation
from .models import InterviewDifficulty, InterviewFocus, InterviewMessage, InterviewSession, SessionStatus
from .registry import SessionRegistry
from .service import InterviewReport, InterviewService, InterviewStatusView, InterviewTurn
from .transcript import QAPair, format_transcript

__all__ = [
    "MAX_QUESTIONS",
    "RECENT_WINDOW",
    "InterviewAI",
    "InterviewDifficulty",
    "InterviewEvaluation",
    "InterviewFocus",
    "InterviewMessage",
    "InterviewReport",
    "InterviewScores",
    "InterviewService",
    "InterviewSession",
    "InterviewStatusView",
    "InterviewTurn",
    "QAPair",
    "SessionRegistry",
    "SessionStatus",
    "format_transcript",
    "interview_ai_with_config",
    "mock_evaluation",
    "parse_evaluation",
]
