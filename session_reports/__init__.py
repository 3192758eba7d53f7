from __future__ import annotations  # Room report package exports

from .models import RoomReport, TranscriptEntry
from .pdf import generate_room_report_pdf
from .room_report import build_room_report, render_report_text

__all__ = ["RoomReport", "TranscriptEntry", "build_room_report", "generate_room_report_pdf", "render_report_text"]
