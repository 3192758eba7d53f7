"""Lightweight CLI helpers for inspecting room and argument tables."""
from __future__ import annotations

import argparse
import json
import sqlite3
from typing import Optional

from config.settings import settings


def tail_rooms(limit: int = 20, db_path: Optional[str] = None) -> None:
    conn = sqlite3.connect(db_path or settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT r.updated_at, r.code, r.mode, r.status, r.current_round, r.locked,
                   (SELECT COUNT(*) FROM participants p WHERE p.room_code = r.code),
                   r.topic
            FROM rooms r
            ORDER BY r.updated_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, code, mode, status, current_round, locked, participants, topic = row
            lock_mark = " locked" if locked else ""
            print(
                f"[{ts}] {code} {mode}/{status} round={current_round} participants={participants}{lock_mark} topic={topic!r}"
            )
    finally:
        conn.close()


def tail_arguments(limit: int = 20, db_path: Optional[str] = None) -> None:
    conn = sqlite3.connect(db_path or settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT a.submitted_at, a.room_code, p.name, a.round, a.final_score, a.scores_json, a.transcript
            FROM arguments a
            LEFT JOIN participants p ON p.room_code = a.room_code AND p.participant_id = a.participant_id
            ORDER BY a.id DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, code, name, round_number, score, scores_json, transcript = row
            summary = json.loads(scores_json).get("summary", "") if scores_json else ""
            print(
                f"[{ts:.0f}] {code} round={round_number} {name or '?'} score={score} "
                f"text={transcript[:60]!r} summary={summary!r}"
            )
    finally:
        conn.close()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-rooms", type=int, help="Show the most recently updated rooms")
    parser.add_argument("--tail-arguments", type=int, help="Show the latest scored arguments")
    parser.add_argument("--db", help="Database path (defaults to DB_PATH)")
    args = parser.parse_args()

    if args.tail_rooms:
        tail_rooms(args.tail_rooms, args.db)
    if args.tail_arguments:
        tail_arguments(args.tail_arguments, args.db)


if __name__ == "__main__":
    main()
