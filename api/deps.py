"""Process-wide service singletons used by the routers."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from config import settings
from evaluation import evaluator_with_config, mock_evaluator
from interview_session import InterviewService, SessionRegistry, interview_ai_with_config
from rooms.service import RoomService
from rooms.store import BACKEND_ERRORS, RoomStore
from speech import mock_transcriber, synthesizer_with_config, transcriber_with_config, unavailable_synthesizer
from storage.rooms import SqliteRoomBackend

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).resolve().parents[1] / "app_config.json"


def _room_store() -> RoomStore:
    if not settings.PERSISTENCE_ENABLED:
        return RoomStore()
    try:
        return RoomStore(SqliteRoomBackend())
    except BACKEND_ERRORS as exc:
        logger.error("Room database unavailable at %s, running memory-only: %s", settings.DB_PATH, exc)
        return RoomStore()


@lru_cache(maxsize=1)
def get_room_service() -> RoomService:
    if settings.ai_enabled:
        evaluator = evaluator_with_config(CONFIG_PATH)
        transcriber = transcriber_with_config(CONFIG_PATH)
    else:
        evaluator, transcriber = mock_evaluator, mock_transcriber
    return RoomService(_room_store(), evaluator=evaluator, transcriber=transcriber)


@lru_cache(maxsize=1)
def get_interview_service() -> InterviewService:
    if settings.ai_enabled:
        return InterviewService(
            SessionRegistry(),
            ai=interview_ai_with_config(CONFIG_PATH),
            transcriber=transcriber_with_config(CONFIG_PATH),
            synthesizer=synthesizer_with_config(CONFIG_PATH),
        )
    return InterviewService(
        SessionRegistry(),
        ai=None,
        transcriber=mock_transcriber,
        synthesizer=unavailable_synthesizer,
    )


def reset_services() -> None:  # Drop singletons so the next request rebuilds them from settings
    get_room_service.cache_clear()
    get_interview_service.cache_clear()


__all__ = ["CONFIG_PATH", "get_interview_service", "get_room_service", "reset_services"]
