"""Tests for the SQLite migration, room writes and the admin tail helpers."""
from __future__ import annotations

import json
import os
import sqlite3

from observability.admin_cli import tail_arguments, tail_rooms
from rooms.models import Participant, Response, Room, RoomStatus
from storage.migrate import migrate
from storage.rooms import SqliteRoomBackend


def test_migrate_creates_tables(tmp_path):
    db_path = str(tmp_path / "nested" / "fresh.db")
    migrate(db_path)
    assert os.path.exists(db_path)
    with sqlite3.connect(db_path) as conn:
        names = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"rooms", "participants", "arguments", "reports"} <= names
    # Re-running is a no-op
    migrate(db_path)


def test_room_rows_are_written(tmp_db: str, scores):
    backend = SqliteRoomBackend()
    room = Room(code="HJK234", topic="Homework bans", host_secret="s3cret", turn_order=["p1"])
    backend.save_room(room)
    backend.insert_participant("HJK234", Participant(id="p1", name="Ravi"))
    argument_id = backend.insert_argument(
        "HJK234",
        "p1",
        Response(round=1, transcript="Rest matters.", scores=scores(summary="Short."), final_score=6.4),
    )
    assert argument_id > 0

    room.status = RoomStatus.COLLECTING
    room.current_round = 1
    backend.save_room(room)

    with sqlite3.connect(tmp_db) as conn:
        row = conn.execute("SELECT status, current_round, turn_order_json FROM rooms WHERE code=?", ("HJK234",)).fetchone()
        assert row == ("collecting", 1, json.dumps(["p1"]))
        row = conn.execute("SELECT final_score, scores_json FROM arguments WHERE id=?", (argument_id,)).fetchone()
        assert row[0] == 6.4
        assert json.loads(row[1])["summary"] == "Short."

    loaded = backend.load_room("HJK234")
    assert loaded.participants["p1"].responses[0].transcript == "Rest matters."
    assert backend.load_room("NOPE22") is None


def test_deleting_participant_drops_their_arguments(tmp_db: str, scores):
    backend = SqliteRoomBackend()
    backend.save_room(Room(code="HJK234", topic="t", host_secret="s"))
    backend.insert_participant("HJK234", Participant(id="p1", name="Ravi"))
    backend.insert_argument("HJK234", "p1", Response(round=1, transcript="x", scores=scores(), final_score=5))
    backend.delete_participant("HJK234", "p1")
    with sqlite3.connect(tmp_db) as conn:
        assert conn.execute("SELECT COUNT(*) FROM arguments").fetchone() == (0,)
        assert conn.execute("SELECT COUNT(*) FROM participants").fetchone() == (0,)


def test_admin_tails_print_recent_rows(tmp_db: str, scores, capsys):
    backend = SqliteRoomBackend()
    backend.save_room(Room(code="HJK234", topic="Homework bans", host_secret="s"))
    backend.insert_participant("HJK234", Participant(id="p1", name="Ravi"))
    backend.insert_argument(
        "HJK234", "p1", Response(round=1, transcript="Rest matters.", scores=scores(summary="Brief."), final_score=6)
    )

    tail_rooms(5, tmp_db)
    tail_arguments(5, tmp_db)
    out = capsys.readouterr().out
    assert "HJK234 debate/waiting" in out
    assert "participants=1" in out
    assert "Ravi" in out
    assert "summary='Brief.'" in out
