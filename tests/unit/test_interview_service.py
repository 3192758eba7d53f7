import pytest

from errors import ConflictError, InvalidRequestError, NotFoundError, UpstreamFailure
from interview_session import InterviewService, SessionRegistry, SessionStatus
from interview_session.engine import MAX_QUESTIONS, RECENT_WINDOW
from interview_session.prompts import mock_question
from llm_gateway import LlmGatewayError
from speech import mock_transcriber, unavailable_synthesizer


class FakeAI:
    def __init__(self, *, fail_ask=False, fail_summary=False, report="{}"):
        self.fail_ask = fail_ask
        self.fail_summary = fail_summary
        self.report = report
        self.payloads = []
        self.summaries = 0

    def ask(self, messages):
        self.payloads.append(list(messages))
        if self.fail_ask:
            raise LlmGatewayError("boom")
        return f"Live question {len(self.payloads)}?"

    def ask_stream(self, messages):
        self.payloads.append(list(messages))
        if self.fail_ask:
            raise LlmGatewayError("boom")
        yield "Streamed "
        yield "question?"

    def summarize(self, request):
        self.summaries += 1
        if self.fail_summary:
            raise LlmGatewayError("summary down")
        return f"summary {self.summaries}"

    def evaluate(self, messages):
        return self.report


def _service(ai=None, **kwargs):
    return InterviewService(
        SessionRegistry(), ai=ai, transcriber=mock_transcriber, synthesizer=unavailable_synthesizer, **kwargs
    )


def _run_full_interview(service):
    turn = service.start("Backend Engineer", "technical", "hard")
    answers = 0
    while turn.status is SessionStatus.ACTIVE:
        answers += 1
        turn = service.respond(turn.session_id, transcript=f"Answer {answers}")
    return turn, answers


def test_mock_interview_runs_to_eight_questions():
    service = _service()
    turn, answers = _run_full_interview(service)
    assert turn.question_number == MAX_QUESTIONS
    assert answers == MAX_QUESTIONS - 1
    status = service.status(turn.session_id)
    assert status.status is SessionStatus.COMPLETE
    assert status.has_summary is True


def test_answer_after_completion_is_recorded_without_new_question():
    service = _service()
    turn, answers = _run_full_interview(service)
    final = service.respond(turn.session_id, transcript="Closing thoughts")
    assert final.status is SessionStatus.COMPLETE
    assert final.question is None
    assert final.question_number == MAX_QUESTIONS
    entries = service.transcript(turn.session_id)
    assert len(entries) == 2 * MAX_QUESTIONS
    assert entries[-1] == {"index": 2 * MAX_QUESTIONS - 1, "speaker": "candidate", "text": "Closing thoughts"}
    assert sum(1 for e in entries if e["speaker"] == "interviewer") == MAX_QUESTIONS


def test_only_one_closing_answer_after_completion():
    service = _service()
    turn, _ = _run_full_interview(service)
    service.respond(turn.session_id, transcript="Closing thoughts")
    with pytest.raises(ConflictError):
        service.respond(turn.session_id, transcript="One more thing")
    with pytest.raises(ConflictError):
        service.respond_stream(turn.session_id, transcript="And another")
    entries = service.transcript(turn.session_id)
    assert len(entries) == 2 * MAX_QUESTIONS
    assert entries[-1]["text"] == "Closing thoughts"


def test_live_payload_stays_bounded():
    ai = FakeAI()
    service = _service(ai)
    _run_full_interview(service)
    assert ai.payloads[0][-1]["content"] == "Please begin the interview with your first question."
    for payload in ai.payloads:
        assert len(payload) <= RECENT_WINDOW + 2
    assert ai.summaries > 0


def test_question_failure_falls_back_to_mock():
    service = _service(FakeAI(fail_ask=True))
    turn = service.start("QA Lead")
    assert turn.question == mock_question(1, "QA Lead")
    turn = service.respond(turn.session_id, transcript="Hello")
    assert turn.question == mock_question(2, "QA Lead")
    assert turn.transcript == "Hello"


def test_summary_failure_keeps_going():
    ai = FakeAI(fail_summary=True)
    service = _service(ai)
    turn, _ = _run_full_interview(service)
    assert service.status(turn.session_id).has_summary is False


def test_streaming_records_question_after_completion():
    service = _service(FakeAI())
    session_id, events = service.start_stream("Designer")
    assert service.status(session_id).question_count == 0
    collected = list(events)
    assert collected[0] == {"session_id": session_id}
    assert [e["token"] for e in collected if "token" in e] == ["Streamed ", "question?"]
    done = collected[-1]
    assert done["done"] is True
    assert done["question"] == "Streamed question?"
    assert service.status(session_id).question_count == 1


def test_answer_rejected_before_opening_question():
    service = _service(FakeAI())
    session_id, events = service.start_stream("Designer")
    with pytest.raises(ConflictError):
        service.respond(session_id, transcript="Too early")
    list(events)
    service.respond(session_id, transcript="Now")


def test_abandoned_stream_releases_session():
    service = _service(FakeAI())
    turn = service.start("Designer")
    events = service.respond_stream(turn.session_id, transcript="Lost connection")
    assert next(events) == {"transcript": "Lost connection"}
    assert service.registry.get(turn.session_id).question_pending is True
    events.close()
    assert service.registry.get(turn.session_id).question_pending is False
    service.respond(turn.session_id, transcript="Retry after disconnect")


def test_unconsumed_streams_leave_session_untouched():
    service = _service(FakeAI())
    session_id, opening = service.start_stream("Designer")
    assert service.registry.get(session_id).question_pending is False

    late = list(opening)
    assert late[-1]["question_number"] == 1

    service.respond_stream(session_id, transcript="Never sent")
    assert service.registry.get(session_id).question_pending is False
    turn = service.respond(session_id, transcript="Sent")
    assert turn.question_number == 2
    answers = [e["text"] for e in service.transcript(session_id) if e["speaker"] == "candidate"]
    assert answers == ["Sent"]


def test_respond_validation():
    service = _service()
    turn = service.start("PM")
    with pytest.raises(InvalidRequestError):
        service.respond(turn.session_id, transcript="  ")
    with pytest.raises(NotFoundError):
        service.respond("missing", transcript="hi")
    with pytest.raises(InvalidRequestError):
        service.start("  ")


def test_audio_answers_use_transcriber():
    service = _service()
    turn = service.start("PM")
    result = service.respond(turn.session_id, audio=b"voice", filename="a.webm")
    assert result.transcript == mock_transcriber(b"voice", "a.webm")


def test_report_uses_live_evaluation_or_mock():
    raw = (
        '{"scores": {"clarity": 9, "relevance": 8, "logical_reasoning": 7, "confidence": 8, "depth": 8},'
        ' "strengths": ["Concrete"], "improvement_areas": ["Brevity"], "overall_feedback": "Solid."}'
    )
    service = _service(FakeAI(report=raw))
    turn = service.start("PM")
    with pytest.raises(InvalidRequestError):
        service.report(turn.session_id)
    service.respond(turn.session_id, transcript="My answer")
    report = service.report(turn.session_id)
    assert report.evaluation.scores.overall == 8.0
    assert report.meta.question_count == 1
    assert report.transcript[0].answer == "My answer"

    broken = _service(FakeAI(report="nonsense"))
    turn = broken.start("PM")
    broken.respond(turn.session_id, transcript="Answer")
    assert broken.report(turn.session_id).evaluation.scores.overall == 6.6

    non_finite = _service(
        FakeAI(
            report='{"scores": {"clarity": NaN, "relevance": Infinity, "logical_reasoning": 7,'
            ' "confidence": 1e400, "depth": 8}}'
        )
    )
    turn = non_finite.start("PM")
    non_finite.respond(turn.session_id, transcript="Answer")
    assert non_finite.report(turn.session_id).evaluation.scores.overall == 6.6


def test_delete_and_tts():
    service = _service()
    turn = service.start("PM")
    service.delete(turn.session_id)
    with pytest.raises(NotFoundError):
        service.status(turn.session_id)
    with pytest.raises(NotFoundError):
        service.delete(turn.session_id)
    with pytest.raises(InvalidRequestError):
        service.speak(" ")
    with pytest.raises(UpstreamFailure):
        service.speak("Hello")
