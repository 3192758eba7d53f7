from __future__ import annotations  # Interview session domain models

import logging
import time
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

Speaker = Literal["interviewer", "candidate"]


class InterviewFocus(str, Enum):
    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    HR = "hr"
    MIXED = "mixed"

    @classmethod
    def coerce(cls, value: Optional[str]) -> "InterviewFocus":
        return _coerce(cls, value, cls.MIXED)


class InterviewDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def coerce(cls, value: Optional[str]) -> "InterviewDifficulty":
        return _coerce(cls, value, cls.MEDIUM)


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETE = "complete"


class InterviewMessage(BaseModel):  # One utterance in the conversation
    speaker: Speaker
    text: str


class InterviewSession(BaseModel):
    id: str
    role: str
    focus: InterviewFocus = InterviewFocus.MIXED
    difficulty: InterviewDifficulty = InterviewDifficulty.MEDIUM
    system_prompt: str
    messages: List[InterviewMessage] = Field(default_factory=list)  # active window
    full_transcript: List[InterviewMessage] = Field(default_factory=list)  # never trimmed
    conversation_summary: Optional[str] = None
    question_count: int = 0
    status: SessionStatus = SessionStatus.ACTIVE
    question_pending: bool = False  # a question is being generated outside the lock
    created_at: float = Field(default_factory=time.time)

    @property
    def complete(self) -> bool:
        return self.status is SessionStatus.COMPLETE


def _coerce(enum_cls, value, default):  # Boundary mapping; unknown values use the default
    if value is None or not str(value).strip():
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        logger.warning("Unknown %s %r, using %s", enum_cls.__name__, value, default.value)
        return default


__all__ = [
    "InterviewDifficulty",
    "InterviewFocus",
    "InterviewMessage",
    "InterviewSession",
    "SessionStatus",
    "Speaker",
]
