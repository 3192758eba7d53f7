"""Discussion rooms: models, codes and lifecycle."""
from .codes import ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH, allocate_code, generate_code, normalize_code
from .models import Participant, Response, Room, RoomStatus

__all__ = [
    "ROOM_CODE_ALPHABET",
    "ROOM_CODE_LENGTH",
    "Participant",
    "Response",
    "Room",
    "RoomStatus",
    "allocate_code",
    "generate_code",
    "normalize_code",
]
