"""Interview session operations.

Collaborator calls (transcription, summarization, question generation) run
outside the session lock. While a question is being generated the session is
marked ``question_pending`` so a second answer cannot interleave; the question
is recorded under the lock once generation completes. Streaming calls validate
eagerly but claim the session and record nothing until their events are consumed.
"""
from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel

from config import settings
from errors import ConflictError, InvalidRequestError, NotFoundError
from llm_gateway import LlmGatewayError
from observability import log_event

from .collaborators import InterviewAI
from .engine import (
    MAX_QUESTIONS,
    RECENT_WINDOW,
    add_candidate_answer,
    add_interviewer_question,
    apply_summarization,
    build_message_payload,
    build_summarization_payload,
    should_summarize,
    transcript_entries,
)
from .evaluator import InterviewEvaluation, build_evaluation_messages, mock_evaluation, parse_evaluation
from .models import InterviewDifficulty, InterviewFocus, InterviewSession, SessionStatus
from .prompts import OPENING_INSTRUCTION, build_system_prompt, mock_question, mock_summary
from .registry import SessionRegistry
from .transcript import QAPair, format_transcript, render_transcript_text

logger = logging.getLogger(__name__)

Transcriber = Callable[[bytes, str], str]
Synthesizer = Callable[[str], bytes]
Event = Dict[str, object]

MAX_ROLE_LENGTH = 120


class InterviewTurn(BaseModel):  # Result of start/respond
    session_id: str
    question: Optional[str] = None
    question_number: int
    status: SessionStatus
    transcript: Optional[str] = None
    message: Optional[str] = None


class InterviewStatusView(BaseModel):
    session_id: str
    role: str
    focus: InterviewFocus
    difficulty: InterviewDifficulty
    question_count: int
    max_questions: int = MAX_QUESTIONS
    status: SessionStatus
    has_summary: bool


class InterviewReportMeta(BaseModel):
    role: str
    focus: InterviewFocus
    difficulty: InterviewDifficulty
    question_count: int
    duration: int  # seconds since the session started


class InterviewReport(BaseModel):
    session_id: str
    meta: InterviewReportMeta
    transcript: List[QAPair]
    evaluation: InterviewEvaluation


class InterviewService:
    def __init__(
        self,
        registry: SessionRegistry,
        *,
        ai: Optional[InterviewAI],
        transcriber: Transcriber,
        synthesizer: Synthesizer,
        max_audio_bytes: Optional[int] = None,
    ) -> None:
        self._registry = registry
        self._ai = ai  # None runs the deterministic mock interviewer
        self._transcriber = transcriber
        self._synthesizer = synthesizer
        self._max_audio_bytes = max_audio_bytes or settings.MAX_AUDIO_BYTES

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    # ---------------------------------------------------------------- start

    def start(self, role: str, focus: Optional[str] = None, difficulty: Optional[str] = None) -> InterviewTurn:
        session = self._create(role, focus, difficulty)
        payload = self._claim_opening(session.id)
        return self._ask_and_record(session.id, payload, 1, session.role)

    def start_stream(
        self, role: str, focus: Optional[str] = None, difficulty: Optional[str] = None
    ) -> Tuple[str, Iterator[Event]]:
        session = self._create(role, focus, difficulty)
        return session.id, self._stream_opening(session.id, session.role)

    # -------------------------------------------------------------- respond

    def respond(
        self,
        session_id: str,
        *,
        transcript: Optional[str] = None,
        audio: Optional[bytes] = None,
        filename: str = "answer.webm",
    ) -> InterviewTurn:
        text = self._answer_text(session_id, transcript, audio, filename)
        pending = self._accept_answer(session_id, text)
        if isinstance(pending, InterviewTurn):
            return pending
        payload, number, role = pending
        turn = self._ask_and_record(session_id, payload, number, role)
        return turn.model_copy(update={"transcript": text})

    def respond_stream(
        self,
        session_id: str,
        *,
        transcript: Optional[str] = None,
        audio: Optional[bytes] = None,
        filename: str = "answer.webm",
    ) -> Iterator[Event]:
        """Validate and transcribe now; record the answer and stream the next question lazily."""

        text = self._answer_text(session_id, transcript, audio, filename)
        with self._registry.hold(session_id) as session:
            _check_answerable(session)
        return self._stream_answer(session_id, text)

    # ---------------------------------------------------------------- reads

    def status(self, session_id: str) -> InterviewStatusView:
        with self._registry.hold(session_id) as session:
            return InterviewStatusView(
                session_id=session.id,
                role=session.role,
                focus=session.focus,
                difficulty=session.difficulty,
                question_count=session.question_count,
                status=session.status,
                has_summary=bool(session.conversation_summary),
            )

    def report(self, session_id: str) -> InterviewReport:
        with self._registry.hold(session_id) as session:
            snapshot = session.model_copy(deep=True)
        formatted = format_transcript(snapshot.full_transcript)
        if not formatted.pairs:
            raise InvalidRequestError("No interview exchanges to evaluate")
        evaluation = self._evaluate(snapshot)
        log_event("interview.report", session_id, count=formatted.question_count, score=evaluation.scores.overall)
        return InterviewReport(
            session_id=session_id,
            meta=InterviewReportMeta(
                role=snapshot.role,
                focus=snapshot.focus,
                difficulty=snapshot.difficulty,
                question_count=formatted.question_count,
                duration=round(time.time() - snapshot.created_at),
            ),
            transcript=formatted.pairs,
            evaluation=evaluation,
        )

    def transcript(self, session_id: str) -> List[Dict[str, object]]:
        with self._registry.hold(session_id) as session:
            return transcript_entries(session)

    def transcript_text(self, session_id: str) -> str:
        with self._registry.hold(session_id) as session:
            return render_transcript_text(session)

    def delete(self, session_id: str) -> None:
        if not self._registry.delete(session_id):
            raise NotFoundError("Interview session not found")
        log_event("interview.deleted", session_id)

    def speak(self, text: str) -> bytes:
        cleaned = (text or "").strip()
        if not cleaned:
            raise InvalidRequestError("Text is required")
        return self._synthesizer(cleaned)

    # -------------------------------------------------------------- helpers

    def _create(self, role: str, focus: Optional[str], difficulty: Optional[str]) -> InterviewSession:
        cleaned = (role or "").strip()
        if not cleaned:
            raise InvalidRequestError("Role is required")
        if len(cleaned) > MAX_ROLE_LENGTH:
            raise InvalidRequestError(f"Role must be at most {MAX_ROLE_LENGTH} characters")
        resolved_focus = InterviewFocus.coerce(focus)
        resolved_difficulty = InterviewDifficulty.coerce(difficulty)
        session = InterviewSession(
            id=str(uuid.uuid4()),
            role=cleaned,
            focus=resolved_focus,
            difficulty=resolved_difficulty,
            system_prompt=build_system_prompt(cleaned, resolved_focus, resolved_difficulty),
        )
        self._registry.add(session)
        log_event("interview.started", session.id, mode=f"{resolved_focus.value}/{resolved_difficulty.value}")
        return session

    def _claim_opening(self, session_id: str) -> List[Dict[str, str]]:
        with self._registry.hold(session_id) as live:
            if live.question_pending or live.question_count:
                raise ConflictError("The opening question was already requested")
            live.question_pending = True
            payload = build_message_payload(live)
        payload.append({"role": "user", "content": OPENING_INSTRUCTION})
        return payload

    def _answer_text(
        self, session_id: str, transcript: Optional[str], audio: Optional[bytes], filename: str
    ) -> str:
        if not session_id:
            raise InvalidRequestError("session_id is required")
        self._registry.get(session_id)
        if audio:
            if len(audio) > self._max_audio_bytes:
                raise InvalidRequestError(f"Audio exceeds {self._max_audio_bytes} bytes")
            text = self._transcriber(audio, filename).strip()
            if not text:
                raise InvalidRequestError("No speech detected in the recording")
            return text
        text = (transcript or "").strip()
        if not text:
            raise InvalidRequestError("Either an audio file or a transcript is required")
        return text

    def _accept_answer(
        self, session_id: str, text: str
    ) -> Union[InterviewTurn, Tuple[List[Dict[str, str]], int, str]]:
        """Record the answer; return the finished turn, or the payload for the next question."""

        with self._registry.hold(session_id) as session:
            _check_answerable(session)
            add_candidate_answer(session, text)
            if session.complete or session.question_count >= MAX_QUESTIONS:
                session.status = SessionStatus.COMPLETE
                log_event("interview.answer", session_id, count=session.question_count, status=session.status.value)
                return InterviewTurn(
                    session_id=session_id,
                    question_number=session.question_count,
                    status=session.status,
                    transcript=text,
                    message="Interview complete. Maximum questions reached.",
                )
            session.question_pending = True
            older = list(session.messages[:-RECENT_WINDOW]) if should_summarize(session) else []
            request = build_summarization_payload(session) if older else None
            previous = session.conversation_summary
        log_event("interview.answer", session_id, count=session.question_count)
        try:
            if request is not None:
                summary = self._summarize(session_id, request, [m.text for m in older if m.speaker == "candidate"], previous)
                if summary:
                    with self._registry.hold(session_id) as session:
                        apply_summarization(session, summary)
                    log_event("interview.summarized", session_id, count=len(older))
            with self._registry.hold(session_id) as session:
                return build_message_payload(session), session.question_count + 1, session.role
        except BaseException:
            self._release(session_id)
            raise

    def _summarize(self, session_id: str, request: Dict[str, str], answers: List[str], previous: Optional[str]) -> str:
        if self._ai is None:
            return mock_summary(answers, previous)
        try:
            return self._ai.summarize(request).strip()
        except LlmGatewayError as exc:
            # The window stays untrimmed and is summarized on the next answer
            logger.warning("Summarization failed for %s: %s", session_id, exc)
            return ""

    def _ask(self, payload: List[Dict[str, str]], number: int, role: str) -> str:
        if self._ai is None:
            return mock_question(number, role)
        try:
            question = self._ai.ask(payload).strip()
        except LlmGatewayError as exc:
            logger.warning("Question generation failed, using mock question %d: %s", number, exc)
            return mock_question(number, role)
        return question or mock_question(number, role)

    def _ask_stream(self, payload: List[Dict[str, str]], number: int, role: str) -> Iterator[str]:
        if self._ai is None:
            yield mock_question(number, role)
            return
        emitted = False
        try:
            for token in self._ai.ask_stream(payload):
                emitted = True
                yield token
        except LlmGatewayError as exc:
            logger.warning("Question stream failed after %s output: %s", "partial" if emitted else "no", exc)
            if not emitted:
                yield mock_question(number, role)

    def _stream_opening(self, session_id: str, role: str) -> Iterator[Event]:
        try:
            payload = self._claim_opening(session_id)
        except (ConflictError, NotFoundError) as exc:
            yield {"error": exc.message}
            return
        yield from self._stream_question(session_id, payload, 1, role, lead=[{"session_id": session_id}])

    def _stream_answer(self, session_id: str, text: str) -> Iterator[Event]:
        try:
            pending = self._accept_answer(session_id, text)
        except (ConflictError, NotFoundError) as exc:
            # Lost a race with another answer after the eager check
            yield {"error": exc.message}
            return
        if isinstance(pending, InterviewTurn):
            yield {"transcript": text}
            yield {"done": True, **pending.model_dump(mode="json")}
            return
        payload, number, role = pending
        yield from self._stream_question(session_id, payload, number, role, lead=[{"transcript": text}])

    def _stream_question(
        self, session_id: str, payload: List[Dict[str, str]], number: int, role: str, lead: Iterable[Event]
    ) -> Iterator[Event]:
        recorded = False
        try:
            yield from lead
            parts: List[str] = []
            for token in self._ask_stream(payload, number, role):
                parts.append(token)
                yield {"token": token}
            question = "".join(parts).strip() or mock_question(number, role)
            try:
                turn = self._record(session_id, question)
            except NotFoundError:
                yield {"error": "Interview session not found"}
                return
            recorded = True
            yield {"done": True, **turn.model_dump(mode="json")}
        finally:
            if not recorded:
                self._release(session_id)

    def _record(self, session_id: str, question: str) -> InterviewTurn:
        with self._registry.hold(session_id) as session:
            session.question_pending = False
            add_interviewer_question(session, question)
            turn = InterviewTurn(
                session_id=session_id,
                question=question,
                question_number=session.question_count,
                status=session.status,
            )
        log_event("interview.question", session_id, count=turn.question_number, status=turn.status.value)
        return turn

    def _ask_and_record(self, session_id: str, payload: List[Dict[str, str]], number: int, role: str) -> InterviewTurn:
        try:
            question = self._ask(payload, number, role)
        except BaseException:
            self._release(session_id)
            raise
        return self._record(session_id, question)

    def _release(self, session_id: str) -> None:
        try:
            with self._registry.hold(session_id) as live:
                live.question_pending = False
        except NotFoundError:
            logger.info("Session %s was deleted while a question was pending", session_id)

    def _evaluate(self, session: InterviewSession) -> InterviewEvaluation:
        if self._ai is None:
            return mock_evaluation()
        try:
            raw = self._ai.evaluate(build_evaluation_messages(session))
        except LlmGatewayError as exc:
            logger.warning("Interview evaluation failed for %s, using mock evaluation: %s", session.id, exc)
            return mock_evaluation()
        evaluation = parse_evaluation(raw)
        if evaluation is None:
            logger.warning("Interview evaluation unparseable for %s: %s", session.id, raw[:300])
            return mock_evaluation()
        return evaluation


def _check_answerable(session: InterviewSession) -> None:
    if session.question_pending:
        raise ConflictError("The next question is still being generated")
    if session.question_count == 0:
        raise ConflictError("The opening question has not been asked yet")
    # A complete session takes one closing answer to its last question
    if session.complete and session.full_transcript[-1].speaker == "candidate":
        raise ConflictError("Interview already complete")


__all__ = [
    "InterviewReport",
    "InterviewReportMeta",
    "InterviewService",
    "InterviewStatusView",
    "InterviewTurn",
]
