from __future__ import annotations  # Question/answer formatting for interview evaluation

import re
from typing import List, Optional, Sequence

from pydantic import BaseModel

from .models import InterviewMessage, InterviewSession

MAX_TRANSCRIPT_CHARS = 6000
MAX_ANSWER_CHARS = 800
TRUNCATION_MARK = "\n\n[Transcript truncated]"


class QAPair(BaseModel):  # One answered interviewer question
    number: int
    question: str
    answer: str


class FormattedTranscript(BaseModel):
    formatted: str
    pairs: List[QAPair]

    @property
    def question_count(self) -> int:
        return len(self.pairs)


def clean_text(text: Optional[str]) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def truncate_text(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def format_transcript(entries: Sequence[InterviewMessage]) -> FormattedTranscript:
    """Pair each question with the answer that followed it; unanswered questions are dropped."""

    pairs: List[QAPair] = []
    number = 0
    question: Optional[str] = None
    answer: Optional[str] = None
    for entry in entries:
        if entry.speaker == "interviewer":
            if question is not None and answer:
                pairs.append(QAPair(number=number, question=question, answer=answer))
            number += 1
            question, answer = clean_text(entry.text), None
        elif question is not None:
            answer = truncate_text(clean_text(entry.text), MAX_ANSWER_CHARS)
    if question is not None and answer:
        pairs.append(QAPair(number=number, question=question, answer=answer))

    formatted = "\n\n".join(f"Q{p.number}: {p.question}\nA{p.number}: {p.answer}" for p in pairs)
    if len(formatted) > MAX_TRANSCRIPT_CHARS:
        formatted = formatted[:MAX_TRANSCRIPT_CHARS] + TRUNCATION_MARK
    return FormattedTranscript(formatted=formatted, pairs=pairs)


def build_evaluation_transcript(session: InterviewSession) -> str:
    transcript = format_transcript(session.full_transcript)
    if not transcript.pairs:
        return "No interview exchanges recorded."
    header = "\n".join(
        [
            f"Role: {session.role}",
            f"Focus: {session.focus.value}",
            f"Difficulty: {session.difficulty.value}",
            f"Questions Answered: {transcript.question_count}",
            "---",
        ]
    )
    return f"{header}\n\n{transcript.formatted}"


def render_transcript_text(session: InterviewSession) -> str:  # Plain-text export of every utterance
    lines = [f"Interview: {session.role} ({session.focus.value}, {session.difficulty.value})", ""]
    for message in session.full_transcript:
        label = "Interviewer" if message.speaker == "interviewer" else "Candidate"
        lines.append(f"{label}: {message.text}")
    return "\n".join(lines) + "\n"


__all__ = [
    "FormattedTranscript",
    "MAX_ANSWER_CHARS",
    "MAX_TRANSCRIPT_CHARS",
    "QAPair",
    "build_evaluation_transcript",
    "clean_text",
    "format_transcript",
    "render_transcript_text",
    "truncate_text",
]
