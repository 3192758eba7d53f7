from __future__ import annotations

import json
from typing import List

import pytest
from fastapi.testclient import TestClient

from api_server import app


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def _events(body: str) -> List[dict]:
    return [json.loads(line[len("data: "):]) for line in body.splitlines() if line.startswith("data: ")]


def test_interview_round_trip(client):
    started = client.post(
        "/api/interview/start", json={"role": "Backend Engineer", "focus": "technical", "difficulty": "hard"}
    )
    assert started.status_code == 200
    first = started.json()
    session_id = first["session_id"]
    assert first["question_number"] == 1
    assert first["question"]

    answered = client.post(
        "/api/interview/respond",
        data={"session_id": session_id, "transcript": "I built a payments API in FastAPI."},
    )
    assert answered.status_code == 200
    turn = answered.json()
    assert turn["question_number"] == 2
    assert turn["transcript"] == "I built a payments API in FastAPI."

    spoken = client.post(
        "/api/interview/respond",
        data={"session_id": session_id},
        files={"audio": ("answer.webm", b"spoken answer bytes", "audio/webm")},
    )
    assert spoken.status_code == 200
    assert spoken.json()["transcript"]

    status = client.get(f"/api/interview/status/{session_id}").json()
    assert status["question_count"] == 3
    assert status["max_questions"] == 8
    assert status["focus"] == "technical"
    assert status["difficulty"] == "hard"

    entries = client.get(f"/api/interview/{session_id}/transcript").json()["entries"]
    assert [e["speaker"] for e in entries] == ["interviewer", "candidate"] * 2 + ["interviewer"]

    text = client.get(f"/api/interview/{session_id}/transcript", params={"format": "text"})
    assert "payments API" in text.text

    report = client.post("/api/interview/report", json={"session_id": session_id})
    assert report.status_code == 200
    body = report.json()
    assert body["meta"]["role"] == "Backend Engineer"
    assert len(body["transcript"]) == 2
    assert 1 <= body["evaluation"]["scores"]["overall"] <= 10

    assert client.delete(f"/api/interview/{session_id}").status_code == 204
    assert client.get(f"/api/interview/status/{session_id}").status_code == 404
    assert client.delete(f"/api/interview/{session_id}").status_code == 404


def test_streamed_start_and_answer(client):
    resp = client.post("/api/interview/start", json={"role": "Data Analyst", "stream": True})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    events = _events(resp.text)
    session_id = events[0]["session_id"]
    assert any("token" in e for e in events)
    done = events[-1]
    assert done["done"] is True
    assert done["session_id"] == session_id
    assert done["question_number"] == 1

    resp = client.post(
        "/api/interview/respond",
        data={"session_id": session_id, "transcript": "I clean data with pandas.", "stream": "true"},
    )
    events = _events(resp.text)
    assert events[0] == {"transcript": "I clean data with pandas."}
    assert events[-1]["question_number"] == 2


def test_interview_validation_errors(client):
    assert client.post("/api/interview/start", json={"role": "  "}).status_code == 400

    session_id = client.post("/api/interview/start", json={"role": "Designer"}).json()["session_id"]
    empty = client.post("/api/interview/respond", data={"session_id": session_id, "transcript": "  "})
    assert empty.status_code == 400

    unknown = client.post("/api/interview/respond", data={"session_id": "missing", "transcript": "hi"})
    assert unknown.status_code == 404

    no_pairs = client.post("/api/interview/report", json={"session_id": session_id})
    assert no_pairs.status_code == 400


def test_tts_unavailable_without_ai(client):
    resp = client.post("/api/interview/tts", json={"text": "Tell me about yourself."})
    assert resp.status_code == 502
    assert resp.json()["detail"] == "TTS unavailable"
    assert client.post("/api/interview/tts", json={"text": " "}).status_code == 400
