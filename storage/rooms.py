"""SQLite persistence for rooms, participants, arguments and report snapshots."""
from __future__ import annotations

import datetime as dt
import json
import sqlite3
from typing import Dict, Optional

from rooms.models import Participant, Response, Room
from scoring import ScoreSet

from .migrate import migrate
from .sqlite import get_conn


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


class SqliteRoomBackend:
    """Durable tier behind the room cache.

    Tables mirror the logical layout: ``rooms`` keyed by code with ``participants``
    and ``arguments`` children plus one ``reports`` row per room.
    """

    def __init__(self) -> None:
        migrate()

    def room_exists(self, code: str) -> bool:
        with get_conn() as conn:
            row = conn.execute("SELECT 1 FROM rooms WHERE code = ?", (code,)).fetchone()
        return row is not None

    def save_room(self, room: Room) -> None:
        """Upsert the room row. Child rows are written by their own methods."""

        with get_conn() as conn:
            conn.execute(
                """
                INSERT INTO rooms (
                    code, topic, mode, host_secret, status, locked, current_round, current_turn,
                    turn_order_json, raised_hands_json, time_limit, turn_seq, turn_submitted,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(code) DO UPDATE SET
                    topic = excluded.topic,
                    mode = excluded.mode,
                    status = excluded.status,
                    locked = excluded.locked,
                    current_round = excluded.current_round,
                    current_turn = excluded.current_turn,
                    turn_order_json = excluded.turn_order_json,
                    raised_hands_json = excluded.raised_hands_json,
                    time_limit = excluded.time_limit,
                    turn_seq = excluded.turn_seq,
                    turn_submitted = excluded.turn_submitted,
                    updated_at = excluded.updated_at
                """,
                (
                    room.code,
                    room.topic,
                    room.mode.value,
                    room.host_secret,
                    room.status.value,
                    int(room.locked),
                    room.current_round,
                    room.current_turn,
                    json.dumps(room.turn_order),
                    json.dumps(room.raised_hands),
                    room.time_limit,
                    room.turn_seq,
                    int(room.turn_submitted),
                    room.created_at,
                    _now(),
                ),
            )

    def insert_participant(self, code: str, participant: Participant) -> None:
        with get_conn() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO participants (room_code, participant_id, name, joined_at) VALUES (?, ?, ?, ?)",
                (code, participant.id, participant.name, participant.joined_at),
            )

    def delete_participant(self, code: str, participant_id: str) -> None:
        with get_conn() as conn:
            conn.execute(
                "DELETE FROM arguments WHERE room_code = ? AND participant_id = ?",
                (code, participant_id),
            )
            conn.execute(
                "DELETE FROM participants WHERE room_code = ? AND participant_id = ?",
                (code, participant_id),
            )

    def insert_argument(self, code: str, participant_id: str, response: Response) -> int:
        with get_conn() as conn:
            cur = conn.execute(
                """INSERT INTO arguments
                   (room_code, participant_id, round, transcript, scores_json, final_score, submitted_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    code,
                    participant_id,
                    response.round,
                    response.transcript,
                    response.scores.model_dump_json(),
                    response.final_score,
                    response.submitted_at,
                ),
            )
            return int(cur.lastrowid)

    def load_room(self, code: str) -> Optional[Room]:
        with get_conn() as conn:
            row = conn.execute("SELECT * FROM rooms WHERE code = ?", (code,)).fetchone()
            if row is None:
                return None
            participant_rows = conn.execute(
                "SELECT * FROM participants WHERE room_code = ? ORDER BY joined_at, rowid",
                (code,),
            ).fetchall()
            argument_rows = conn.execute(
                "SELECT * FROM arguments WHERE room_code = ? ORDER BY id",
                (code,),
            ).fetchall()
        participants: Dict[str, Participant] = {
            p["participant_id"]: Participant(id=p["participant_id"], name=p["name"], joined_at=p["joined_at"])
            for p in participant_rows
        }
        for arg in argument_rows:
            owner = participants.get(arg["participant_id"])
            if owner is None:
                continue
            owner.responses.append(_response_from_row(arg))
        return Room(
            code=row["code"],
            topic=row["topic"],
            mode=row["mode"],
            host_secret=row["host_secret"],
            status=row["status"],
            locked=bool(row["locked"]),
            current_round=row["current_round"],
            current_turn=row["current_turn"],
            turn_order=json.loads(row["turn_order_json"]),
            raised_hands=json.loads(row["raised_hands_json"]),
            participants=participants,
            time_limit=row["time_limit"],
            turn_seq=row["turn_seq"],
            turn_submitted=bool(row["turn_submitted"]),
            created_at=row["created_at"],
        )

    def save_report(self, code: str, report_json: str) -> None:
        with get_conn() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO reports (room_code, report_json, generated_at) VALUES (?, ?, ?)",
                (code, report_json, _now()),
            )

    def load_report(self, code: str) -> Optional[str]:
        with get_conn() as conn:
            row = conn.execute("SELECT report_json FROM reports WHERE room_code = ?", (code,)).fetchone()
        return row["report_json"] if row else None


def _response_from_row(row: sqlite3.Row) -> Response:
    return Response(
        round=row["round"],
        transcript=row["transcript"],
        scores=ScoreSet.model_validate_json(row["scores_json"]),
        final_score=row["final_score"],
        submitted_at=row["submitted_at"],
    )


__all__ = ["SqliteRoomBackend"]
