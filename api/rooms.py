"""FastAPI routes for discussion rooms."""
from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from api.deps import get_room_service
from api.schemas import (
    CreateRoomReq,
    HostParticipantReq,
    HostReq,
    JoinReq,
    JoinResp,
    LockReq,
    ParticipantReq,
    RoomCreatedResp,
    RoomView,
    SubmitResp,
    TurnStatusResp,
)
from insights import ModeratorInsights, ParticipationAnalytics
from rooms.service import RoomService
from session_reports import RoomReport, generate_room_report_pdf, render_report_text

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@router.post("", response_model=RoomCreatedResp, status_code=201)
def create_room(payload: CreateRoomReq, service: RoomService = Depends(get_room_service)) -> RoomCreatedResp:
    room = service.create_room(payload.topic, payload.mode, payload.time_limit)
    return RoomCreatedResp(
        code=room.code,
        host_secret=room.host_secret,
        topic=room.topic,
        mode=room.mode,
        mode_label=room.mode.label,
        time_limit=room.time_limit,
    )


@router.get("/{code}", response_model=RoomView)
def get_room(code: str, service: RoomService = Depends(get_room_service)) -> RoomView:
    return RoomView.from_room(service.get_room(code))


@router.post("/{code}/join", response_model=JoinResp)
def join_room(code: str, payload: JoinReq, service: RoomService = Depends(get_room_service)) -> JoinResp:
    room, participant = service.join(code, payload.name)
    return JoinResp(participant_id=participant.id, name=participant.name, room=RoomView.from_room(room))


@router.post("/{code}/lock", response_model=RoomView)
def lock_room(code: str, payload: LockReq, service: RoomService = Depends(get_room_service)) -> RoomView:
    return RoomView.from_room(service.set_lock(code, payload.host_secret, payload.locked))


@router.post("/{code}/remove-participant", response_model=RoomView)
def remove_participant(
    code: str, payload: HostParticipantReq, service: RoomService = Depends(get_room_service)
) -> RoomView:
    return RoomView.from_room(service.remove_participant(code, payload.host_secret, payload.participant_id))


@router.post("/{code}/start", response_model=RoomView)
def start_room(code: str, payload: HostReq, service: RoomService = Depends(get_room_service)) -> RoomView:
    return RoomView.from_room(service.start(code, payload.host_secret))


@router.post("/{code}/next-turn", response_model=RoomView)
def next_turn(code: str, payload: HostReq, service: RoomService = Depends(get_room_service)) -> RoomView:
    return RoomView.from_room(service.next_turn(code, payload.host_secret))


@router.post("/{code}/assign-turn", response_model=RoomView)
def assign_turn(code: str, payload: HostParticipantReq, service: RoomService = Depends(get_room_service)) -> RoomView:
    return RoomView.from_room(service.assign_turn(code, payload.host_secret, payload.participant_id))


@router.post("/{code}/raise-hand", response_model=RoomView)
def raise_hand(code: str, payload: ParticipantReq, service: RoomService = Depends(get_room_service)) -> RoomView:
    return RoomView.from_room(service.raise_hand(code, payload.participant_id))


@router.post("/{code}/lower-hand", response_model=RoomView)
def lower_hand(code: str, payload: ParticipantReq, service: RoomService = Depends(get_room_service)) -> RoomView:
    return RoomView.from_room(service.lower_hand(code, payload.participant_id))


@router.post("/{code}/end", response_model=RoomReport)
def end_room(code: str, payload: HostReq, service: RoomService = Depends(get_room_service)) -> RoomReport:
    return service.end(code, payload.host_secret)


@router.post("/{code}/submit", response_model=SubmitResp)
def submit_argument(
    code: str,
    participant_id: str = Form(...),
    transcript: Optional[str] = Form(default=None),
    audio: Optional[UploadFile] = File(default=None),
    service: RoomService = Depends(get_room_service),
) -> SubmitResp:
    data = audio.file.read() if audio is not None else None
    filename = (audio.filename if audio is not None else None) or "audio.webm"
    response = service.submit(code, participant_id, transcript=transcript, audio=data, filename=filename)
    return SubmitResp.from_response(response)


@router.get("/{code}/turn-status", response_model=TurnStatusResp)
def turn_status(
    code: str, participant_id: Optional[str] = None, service: RoomService = Depends(get_room_service)
) -> TurnStatusResp:
    return TurnStatusResp.from_room(service.turn_status(code, participant_id), participant_id)


@router.get("/{code}/results", response_model=RoomReport)
def room_results(code: str, service: RoomService = Depends(get_room_service)) -> RoomReport:
    return service.results(code)


@router.get("/{code}/report")
def room_report(
    code: str,
    format: Literal["json", "pdf", "text"] = "json",
    service: RoomService = Depends(get_room_service),
) -> Response:
    report = service.results(code)
    stem = f"debaitor-report-{report.room_code}"
    if format == "pdf":
        headers = {"Content-Disposition": f'attachment; filename="{stem}.pdf"'}
        return Response(content=generate_room_report_pdf(report), media_type="application/pdf", headers=headers)
    if format == "text":
        headers = {"Content-Disposition": f'attachment; filename="{stem}.txt"'}
        return Response(content=render_report_text(report), media_type="text/plain; charset=utf-8", headers=headers)
    headers = {"Content-Disposition": f'attachment; filename="{stem}.json"'}
    return Response(content=report.model_dump_json(indent=2), media_type="application/json", headers=headers)


@router.get("/{code}/analytics", response_model=ParticipationAnalytics)
def room_analytics(code: str, service: RoomService = Depends(get_room_service)) -> ParticipationAnalytics:
    return service.analytics(code)


@router.get("/{code}/insights", response_model=ModeratorInsights)
def room_insights(code: str, service: RoomService = Depends(get_room_service)) -> ModeratorInsights:
    return service.insights(code)
