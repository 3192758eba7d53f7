"""Room code generation and normalisation."""
from __future__ import annotations

import secrets
from typing import Callable

from errors import ConflictError

# 32 symbols; 0, 1, I and O are left out because they read ambiguously
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6


def generate_code() -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def allocate_code(
    exists: Callable[[str], bool],
    *,
    attempts: int,
    generate: Callable[[], str] = generate_code,
) -> str:
    """Draw codes until one is unused, resampling on collision."""

    for _ in range(attempts):
        code = generate()
        if not exists(code):
            return code
    raise ConflictError(f"Could not allocate a unique room code after {attempts} attempts")


def normalize_code(raw: str) -> str:
    return (raw or "").strip().upper()


__all__ = ["ROOM_CODE_ALPHABET", "ROOM_CODE_LENGTH", "allocate_code", "generate_code", "normalize_code"]
