from interview_session.evaluator import mock_evaluation, parse_evaluation
from interview_session.models import InterviewMessage, InterviewSession
from interview_session.transcript import (
    MAX_ANSWER_CHARS,
    MAX_TRANSCRIPT_CHARS,
    build_evaluation_transcript,
    format_transcript,
)


def _msg(speaker, text):
    return InterviewMessage(speaker=speaker, text=text)


def test_pairs_skip_unanswered_questions():
    entries = [
        _msg("interviewer", "Tell me   about\nyourself."),
        _msg("candidate", "  I build   APIs. "),
        _msg("interviewer", "Skipped?"),
        _msg("interviewer", "Why Python?"),
        _msg("candidate", "Ecosystem."),
        _msg("interviewer", "Trailing question"),
    ]
    result = format_transcript(entries)
    assert [(p.number, p.question, p.answer) for p in result.pairs] == [
        (1, "Tell me about yourself.", "I build APIs."),
        (3, "Why Python?", "Ecosystem."),
    ]
    assert result.formatted == "Q1: Tell me about yourself.\nA1: I build APIs.\n\nQ3: Why Python?\nA3: Ecosystem."


def test_long_answers_and_transcripts_are_truncated():
    entries = []
    for number in range(12):
        entries.append(_msg("interviewer", f"Question {number}"))
        entries.append(_msg("candidate", "word " * 400))
    result = format_transcript(entries)
    assert all(len(p.answer) <= MAX_ANSWER_CHARS + 3 for p in result.pairs)
    assert result.pairs[0].answer.endswith("...")
    assert result.formatted.endswith("[Transcript truncated]")
    assert len(result.formatted) <= MAX_TRANSCRIPT_CHARS + len("\n\n[Transcript truncated]")


def test_evaluation_transcript_header():
    session = InterviewSession(id="s", role="SRE", system_prompt="p")
    assert build_evaluation_transcript(session) == "No interview exchanges recorded."
    session.full_transcript = [_msg("interviewer", "Q"), _msg("candidate", "A")]
    text = build_evaluation_transcript(session)
    assert text.startswith("Role: SRE\nFocus: mixed\nDifficulty: medium\nQuestions Answered: 1\n---")


def test_parse_evaluation_clamps_and_averages():
    raw = """```json
    {"scores": {"clarity": 12, "relevance": 7.6, "logical_reasoning": 0, "confidence": 6, "depth": 5},
     "strengths": ["Structured"], "improvement_areas": "not a list", "overall_feedback": 3}
    ```"""
    evaluation = parse_evaluation(raw)
    assert evaluation is not None
    scores = evaluation.scores
    assert (scores.clarity, scores.relevance, scores.logical_reasoning) == (10, 8, 1)
    assert scores.overall == 6.0
    assert evaluation.strengths == ["Structured"]
    assert evaluation.improvement_areas == []
    assert evaluation.overall_feedback == ""


def test_parse_evaluation_rejects_bad_payloads():
    assert parse_evaluation("") is None
    assert parse_evaluation("not json") is None
    assert parse_evaluation('{"scores": {"clarity": 5}}') is None
    assert parse_evaluation('{"scores": {"clarity": "5", "relevance": 5, "logical_reasoning": 5, '
                            '"confidence": 5, "depth": 5}}') is None
    for bad in ("NaN", "Infinity", "-Infinity", "1e400"):
        payload = (
            '{"scores": {"clarity": %s, "relevance": 5, "logical_reasoning": 5, "confidence": 5, "depth": 5}}' % bad
        )
        assert parse_evaluation(payload) is None


def test_mock_evaluation_overall():
    assert mock_evaluation().scores.overall == 6.6
