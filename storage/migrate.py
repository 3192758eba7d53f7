"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

from config.settings import settings

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS rooms (
  code TEXT PRIMARY KEY,
  topic TEXT NOT NULL,
  mode TEXT NOT NULL,
  host_secret TEXT NOT NULL,
  status TEXT NOT NULL,
  locked INTEGER NOT NULL DEFAULT 0,
  current_round INTEGER NOT NULL DEFAULT 0,
  current_turn TEXT,
  turn_order_json TEXT NOT NULL,
  raised_hands_json TEXT NOT NULL,
  time_limit INTEGER NOT NULL,
  turn_seq INTEGER NOT NULL DEFAULT 0,
  turn_submitted INTEGER NOT NULL DEFAULT 0,
  created_at REAL NOT NULL,
  updated_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS participants (
  room_code TEXT NOT NULL,
  participant_id TEXT NOT NULL,
  name TEXT NOT NULL,
  joined_at REAL NOT NULL,
  PRIMARY KEY (room_code, participant_id),
  FOREIGN KEY (room_code) REFERENCES rooms(code) ON DELETE CASCADE
);
""",
    """
CREATE TABLE IF NOT EXISTS arguments (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  room_code TEXT NOT NULL,
  participant_id TEXT NOT NULL,
  round INTEGER NOT NULL,
  transcript TEXT NOT NULL,
  scores_json TEXT NOT NULL,
  final_score REAL NOT NULL,
  submitted_at REAL NOT NULL,
  FOREIGN KEY (room_code) REFERENCES rooms(code) ON DELETE CASCADE
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_arguments_room ON arguments (room_code, participant_id);
""",
    """
CREATE TABLE IF NOT EXISTS reports (
  room_code TEXT PRIMARY KEY,
  report_json TEXT NOT NULL,
  generated_at TEXT NOT NULL,
  FOREIGN KEY (room_code) REFERENCES rooms(code) ON DELETE CASCADE
);
""",
]


def migrate(db_path: str | None = None) -> None:
    """Apply schema migrations to the SQLite database."""

    db_path = db_path or settings.DB_PATH
    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    migrate()
