"""Conversation window and summarization protocol for interview sessions.

The session keeps two histories. ``full_transcript`` records every utterance
and is never trimmed. ``messages`` is the active window; once it grows past
``RECENT_WINDOW`` entries the older ones are folded into
``conversation_summary`` and dropped. Every payload sent to the question
generator is therefore bounded: the system prompt, the summary if any, and at
most ``RECENT_WINDOW`` recent messages.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from .models import InterviewMessage, InterviewSession, SessionStatus

MAX_QUESTIONS = 8
RECENT_WINDOW = 6  # three question/answer exchanges

SUMMARY_PREFIX = "CONVERSATION SUMMARY (earlier exchanges):"

_ROLE_FOR = {"interviewer": "assistant", "candidate": "user"}
_LABEL_FOR = {"interviewer": "Interviewer", "candidate": "Candidate"}


def build_message_payload(session: InterviewSession) -> List[Dict[str, str]]:
    payload = [{"role": "system", "content": session.system_prompt}]
    if session.conversation_summary:
        payload.append({"role": "system", "content": f"{SUMMARY_PREFIX}\n{session.conversation_summary}"})
    for message in session.messages[-RECENT_WINDOW:]:
        payload.append({"role": _ROLE_FOR[message.speaker], "content": message.text})
    return payload


def add_candidate_answer(session: InterviewSession, text: str) -> None:
    message = InterviewMessage(speaker="candidate", text=text)
    session.messages.append(message)
    session.full_transcript.append(message.model_copy())


def add_interviewer_question(session: InterviewSession, text: str) -> None:
    """Record a question; the eighth one completes the session."""

    if session.complete:
        raise ValueError(f"Session {session.id} is complete; no further questions")
    message = InterviewMessage(speaker="interviewer", text=text)
    session.messages.append(message)
    session.full_transcript.append(message.model_copy())
    session.question_count += 1
    if session.question_count >= MAX_QUESTIONS:
        session.status = SessionStatus.COMPLETE


def should_summarize(session: InterviewSession) -> bool:
    return len(session.messages) > RECENT_WINDOW


def build_summarization_payload(session: InterviewSession) -> Optional[Dict[str, str]]:
    older = session.messages[:-RECENT_WINDOW]
    if not older:
        return None
    lines = "\n".join(f"{_LABEL_FOR[m.speaker]}: {m.text}" for m in older)
    previous = ""
    if session.conversation_summary:
        previous = f"Previous summary:\n{session.conversation_summary}\n\nNew exchanges to incorporate:\n"
    content = (
        f"{previous}Summarize the following interview exchanges into 2-3 concise lines. "
        "Capture the key topics discussed and any notable points from the candidate's answers. "
        f"Do not include questions verbatim.\n\n{lines}"
    )
    return {"role": "user", "content": content}


def apply_summarization(session: InterviewSession, summary: str) -> None:
    session.conversation_summary = summary
    session.messages = session.messages[-RECENT_WINDOW:]


def transcript_entries(session: InterviewSession) -> List[Dict[str, object]]:  # Indexed export view
    return [
        {"index": index, "speaker": message.speaker, "text": message.text}
        for index, message in enumerate(session.full_transcript)
    ]


__all__ = [
    "MAX_QUESTIONS",
    "RECENT_WINDOW",
    "SUMMARY_PREFIX",
    "add_candidate_answer",
    "add_interviewer_question",
    "apply_summarization",
    "build_message_payload",
    "build_summarization_payload",
    "should_summarize",
    "transcript_entries",
]
