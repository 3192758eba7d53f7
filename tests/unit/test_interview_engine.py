import pytest

from interview_session.engine import (
    MAX_QUESTIONS,
    RECENT_WINDOW,
    SUMMARY_PREFIX,
    add_candidate_answer,
    add_interviewer_question,
    apply_summarization,
    build_message_payload,
    build_summarization_payload,
    should_summarize,
)
from interview_session.models import InterviewDifficulty, InterviewFocus, InterviewSession, SessionStatus
from interview_session.prompts import build_system_prompt, mock_question


def _session() -> InterviewSession:
    return InterviewSession(
        id="s1",
        role="Backend Engineer",
        system_prompt=build_system_prompt("Backend Engineer", InterviewFocus.TECHNICAL, InterviewDifficulty.HARD),
    )


def test_system_prompt_mentions_parameters():
    prompt = _session().system_prompt
    assert "**Backend Engineer**" in prompt
    assert "Focus Area: technical" in prompt
    assert "Difficulty Level: hard" in prompt
    assert "walk me through" in prompt


def test_focus_and_difficulty_coercion():
    assert InterviewFocus.coerce(None) is InterviewFocus.MIXED
    assert InterviewFocus.coerce("Behavioral") is InterviewFocus.BEHAVIORAL
    assert InterviewDifficulty.coerce("brutal") is InterviewDifficulty.MEDIUM


def test_payload_maps_speakers_to_chat_roles():
    session = _session()
    add_interviewer_question(session, "Q1")
    add_candidate_answer(session, "A1")
    payload = build_message_payload(session)
    assert [m["role"] for m in payload] == ["system", "assistant", "user"]
    assert payload[0]["content"] == session.system_prompt


def test_eighth_question_completes_session():
    session = _session()
    for number in range(1, MAX_QUESTIONS + 1):
        assert session.status is SessionStatus.ACTIVE
        add_interviewer_question(session, f"Q{number}")
        add_candidate_answer(session, f"A{number}")
    assert session.status is SessionStatus.COMPLETE
    assert session.question_count == MAX_QUESTIONS
    with pytest.raises(ValueError):
        add_interviewer_question(session, "Q9")


def test_summarization_keeps_window_bounded_and_transcript_whole():
    session = _session()
    exchanges = 7
    for number in range(1, exchanges + 1):
        add_interviewer_question(session, f"Q{number}")
        add_candidate_answer(session, f"A{number}")
        if should_summarize(session):
            request = build_summarization_payload(session)
            assert request is not None and request["role"] == "user"
            apply_summarization(session, f"summary after {number}")
        assert len(session.messages) <= RECENT_WINDOW
        payload = build_message_payload(session)
        assert len(payload) <= RECENT_WINDOW + 2
    assert len(session.full_transcript) == 2 * exchanges
    assert session.conversation_summary == f"summary after {exchanges}"
    payload = build_message_payload(session)
    assert payload[1]["role"] == "system"
    assert payload[1]["content"].startswith(SUMMARY_PREFIX)


def test_summarization_payload_carries_previous_summary():
    session = _session()
    session.conversation_summary = "Talked about caching."
    for number in range(4):
        add_interviewer_question(session, f"Q{number}")
        add_candidate_answer(session, f"A{number}")
    request = build_summarization_payload(session)
    assert request["content"].startswith("Previous summary:\nTalked about caching.")
    assert "Interviewer: Q0\nCandidate: A0" in request["content"]
    assert "2-3 concise lines" in request["content"]


def test_no_summarization_payload_within_window():
    session = _session()
    add_interviewer_question(session, "Q1")
    assert build_summarization_payload(session) is None
    assert not should_summarize(session)


def test_mock_questions_are_deterministic():
    assert mock_question(1, "Data Analyst").startswith("Welcome! I'll be your interviewer for the Data Analyst role")
    assert mock_question(8, "x") == "Is there anything you'd like to ask me or add before we wrap up?"
    assert mock_question(3, "x") == mock_question(3, "y")
