from __future__ import annotations  # Styled PDF rendering for room reports

import textwrap
from datetime import datetime
from typing import Any, List, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .models import RoomReport, TranscriptEntry


DEJAVU_SANS = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"  # System font
DEJAVU_SANS_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background
ROW_FILL = (247, 250, 255)  # Zebra row fill


def _format_timestamp(value: float) -> str:  # Epoch seconds to a short clock time
    return datetime.fromtimestamp(value).strftime("%H:%M:%S")


def _effective_width(pdf: FPDF) -> float:
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


class ReportPDF(FPDF):  # PDF with custom header/footer styling
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "DebAItor - Session Report"
        self.font_regular = "Helvetica"
        self.font_bold = "Helvetica"
        self.supports_unicode = False

    def use_unicode_fonts(self) -> None:  # Switch to DejaVu when the system provides it
        try:
            self.add_font("DejaVu", "", DEJAVU_SANS)
            self.add_font("DejaVu", "B", DEJAVU_SANS_BOLD)
        except (OSError, RuntimeError):
            return
        self.font_regular = "DejaVu"
        self.font_bold = "DejaVu"
        self.supports_unicode = True

    def prepare_text(self, text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        if self.supports_unicode:
            return value
        return value.replace("•", "-").encode("latin-1", "ignore").decode("latin-1")

    def header(self) -> None:  # Accent banner on the first page, rule on the rest
        usable = _effective_width(self)
        if self.page_no() == 1:
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, 20, style="F")
            self.set_text_color(255, 255, 255)
            self.set_font(self.font_bold, "B", 16)
            self.set_xy(self.l_margin, 6)
            self.cell(usable, 8, self.prepare_text(self.header_title), align="C")
            self.set_text_color(*TEXT)
            self.set_y(26)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self.font_bold, "B", 12)
            self.cell(usable, 6, self.prepare_text(self.header_title))
            mark = self.get_y() + 6
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.set_y(mark + 5)

    def footer(self) -> None:  # Pagination footer
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font(self.font_regular, "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 13)
    pdf.cell(0, 9, pdf.prepare_text(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Two-column label/value grid
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        for part, (font, style, size, color) in enumerate(
            ((pdf.font_regular, "", 10, MUTED), (pdf.font_bold, "B", 11, TEXT))
        ):
            pdf.set_x(pdf.l_margin)
            pdf.set_text_color(*color)
            pdf.set_font(font, style, size)
            pdf.cell(col, line, pdf.prepare_text(left[part]), new_x=XPos.RIGHT, new_y=YPos.TOP)
            pdf.cell(col, line, pdf.prepare_text(right[part]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _render_winner(pdf: ReportPDF, report: RoomReport) -> None:
    winner = report.winner
    label = f"{winner.name} (Score: {winner.average_score}/10)" if winner else "No participants"
    width = _effective_width(pdf)
    top = pdf.get_y()
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, top, width, 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, top + 2)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.cell(width - 12, 6, "Winner")
    pdf.set_xy(pdf.l_margin + 6, top + 8)
    pdf.set_text_color(*ACCENT)
    pdf.set_font(pdf.font_bold, "B", 13)
    pdf.cell(width - 12, 7, pdf.prepare_text(label))
    pdf.set_y(top + 20)
    pdf.set_text_color(*TEXT)


def _render_standings(pdf: ReportPDF, report: RoomReport) -> None:
    headers = ["#", "Participant", "Score", "Raw", "Logic", "Clarity", "Relevance", "Bias", "Args"]
    fractions = [0.06, 0.26, 0.10, 0.09, 0.09, 0.10, 0.12, 0.09, 0.09]
    widths = [_effective_width(pdf) * f for f in fractions]
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(pdf.font_bold, "B", 10)
    for width, title in zip(widths, headers):
        pdf.cell(width, 8, title, align="L", fill=True)
    pdf.ln(8)
    pdf.set_text_color(*TEXT)
    if not report.results:
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.multi_cell(_effective_width(pdf), 6, "No participants joined this room.")
        pdf.set_text_color(*TEXT)
        pdf.ln(4)
        return
    pdf.set_font(pdf.font_regular, "", 10)
    for idx, result in enumerate(report.results):
        fill = idx % 2 == 0
        if fill:
            pdf.set_fill_color(*ROW_FILL)
        averages = result.average_scores
        values = [
            str(result.rank),
            textwrap.shorten(result.name, width=28, placeholder="..."),
            f"{result.average_score}",
            f"{result.raw_average_score}",
            f"{averages.logic}",
            f"{averages.clarity}",
            f"{averages.relevance}",
            f"{averages.emotional_bias}",
            str(result.arguments_submitted),
        ]
        pdf.set_x(pdf.l_margin)
        for width, value in zip(widths, values):
            pdf.cell(width, 7, pdf.prepare_text(value), border=0, fill=fill)
        pdf.ln(7)
    pdf.ln(2)


def _render_entry(pdf: ReportPDF, entry: TranscriptEntry) -> None:
    width = _effective_width(pdf)
    pdf.set_x(pdf.l_margin)
    pdf.set_text_color(*ACCENT)
    pdf.set_font(pdf.font_bold, "B", 10)
    heading = f"[{_format_timestamp(entry.submitted_at)}] {entry.participant_name} - Score: {entry.final_score}/10"
    pdf.multi_cell(width, 5.5, pdf.prepare_text(heading))
    pdf.set_x(pdf.l_margin)
    pdf.set_text_color(60, 60, 60)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.multi_cell(width, 5.5, pdf.prepare_text(f'"{entry.transcript or "[No transcript available]"}"'))
    if entry.summary:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 9)
        pdf.multi_cell(width, 5, pdf.prepare_text(f"Summary: {entry.summary}"))
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y() + 1
    pdf.line(pdf.l_margin, y, pdf.l_margin + width, y)
    pdf.set_y(y + 3)
    pdf.set_text_color(*TEXT)


def _render_transcript(pdf: ReportPDF, entries: List[TranscriptEntry]) -> None:
    if not entries:
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.multi_cell(_effective_width(pdf), 6, "No arguments were submitted in this room.")
        pdf.set_text_color(*TEXT)
        return
    current_round = None
    for entry in entries:
        if entry.round != current_round:
            current_round = entry.round
            pdf.ln(2)
            pdf.set_x(pdf.l_margin)
            pdf.set_font(pdf.font_bold, "B", 12)
            pdf.set_text_color(*TEXT)
            pdf.cell(0, 8, f"Round {current_round}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        _render_entry(pdf, entry)


def generate_room_report_pdf(report: RoomReport) -> bytes:  # Build PDF payload for a room report
    pdf = ReportPDF()
    pdf.alias_nb_pages()
    pdf.use_unicode_fonts()
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Session Overview")
    _meta_block(
        pdf,
        [
            ("Room Code", report.room_code),
            ("Mode", report.mode_label),
            ("Topic", textwrap.shorten(report.topic, width=40, placeholder="...")),
            ("Total Rounds", str(report.total_rounds)),
            ("Participants", str(len(report.results))),
            ("Balance Score", f"{report.analytics.balance_score}/100"),
            ("Generated", report.generated_at),
            ("Arguments", str(report.analytics.total_arguments)),
        ],
    )

    _render_winner(pdf, report)

    _section_title(pdf, "Final Standings")
    _render_standings(pdf, report)

    pdf.add_page()
    _section_title(pdf, "Complete Conversation Transcript")
    _render_transcript(pdf, report.transcript)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "generate_room_report_pdf"]
