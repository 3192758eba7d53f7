import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

from api.deps import reset_services
from config.settings import settings
from evaluation import mock_evaluator
from rooms.service import RoomService
from rooms.store import RoomStore
from scoring import ScoreSet
from speech import mock_transcriber
from storage.migrate import migrate


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch, tmp_path):
    db_path = str(tmp_path / "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    monkeypatch.setattr(settings, "AI_MODE", "mock", raising=False)
    migrate(db_path)
    reset_services()
    try:
        yield db_path
    finally:
        reset_services()


def make_scores(logic=7.0, clarity=7.0, relevance=7.0, emotional_bias=3.0, **extra) -> ScoreSet:
    return ScoreSet(logic=logic, clarity=clarity, relevance=relevance, emotional_bias=emotional_bias, **extra)


@pytest.fixture
def scores():
    return make_scores


@pytest.fixture
def room_service():
    """Memory-only room service with the deterministic mock evaluator."""

    return RoomService(RoomStore(), evaluator=mock_evaluator, transcriber=mock_transcriber)
