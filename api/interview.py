"""FastAPI routes for AI interview sessions."""
from __future__ import annotations

import json
from typing import Dict, Iterator, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from fastapi.responses import StreamingResponse

from api.deps import get_interview_service
from api.schemas import InterviewReportReq, InterviewStartReq, TtsReq
from interview_session import InterviewReport, InterviewService, InterviewStatusView

router = APIRouter(prefix="/api/interview", tags=["interview"])

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


def _sse(events: Iterator[Dict[str, object]]) -> StreamingResponse:
    def _encode() -> Iterator[str]:
        for event in events:
            yield f"data: {json.dumps(event)}\n\n"

    return StreamingResponse(_encode(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/start")
def start_interview(payload: InterviewStartReq, service: InterviewService = Depends(get_interview_service)):
    if payload.stream:
        _, events = service.start_stream(payload.role, payload.focus, payload.difficulty)
        return _sse(events)
    return service.start(payload.role, payload.focus, payload.difficulty)


@router.post("/respond")
def respond(
    session_id: str = Form(...),
    transcript: Optional[str] = Form(default=None),
    stream: bool = Form(default=False),
    audio: Optional[UploadFile] = File(default=None),
    service: InterviewService = Depends(get_interview_service),
):
    data = audio.file.read() if audio is not None else None
    filename = (audio.filename if audio is not None else None) or "answer.webm"
    if stream:
        return _sse(service.respond_stream(session_id, transcript=transcript, audio=data, filename=filename))
    return service.respond(session_id, transcript=transcript, audio=data, filename=filename)


@router.get("/status/{session_id}", response_model=InterviewStatusView)
def interview_status(session_id: str, service: InterviewService = Depends(get_interview_service)):
    return service.status(session_id)


@router.post("/report", response_model=InterviewReport)
def interview_report(payload: InterviewReportReq, service: InterviewService = Depends(get_interview_service)):
    return service.report(payload.session_id)


@router.post("/tts")
def text_to_speech(payload: TtsReq, service: InterviewService = Depends(get_interview_service)) -> Response:
    audio = service.speak(payload.text)
    return Response(content=audio, media_type="audio/mpeg", headers={"Cache-Control": "no-cache"})


@router.get("/{session_id}/transcript")
def interview_transcript(
    session_id: str,
    format: Literal["json", "text"] = "json",
    service: InterviewService = Depends(get_interview_service),
):
    if format == "text":
        return Response(content=service.transcript_text(session_id), media_type="text/plain; charset=utf-8")
    return {"session_id": session_id, "entries": service.transcript(session_id)}


@router.delete("/{session_id}", status_code=204)
def delete_interview(session_id: str, service: InterviewService = Depends(get_interview_service)) -> Response:
    service.delete(session_id)
    return Response(status_code=204)


__all__ = ["router"]
