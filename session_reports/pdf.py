from __future__ import annotations  # Styled PDF rendering for stored interview sessions

import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from session_store.models import AnswerScore, Session


DEJAVU_SANS = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"  # System font
DEJAVU_SANS_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background


def _format_timestamp(value: Optional[int]) -> str:  # Epoch milliseconds to display string
    if not value:
        return "-"
    moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return moment.strftime("%d %b %Y, %I:%M %p UTC").lstrip("0").replace(" 0", " ")


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


def _calc_text_height(pdf: FPDF, width: float, text: str, line_height: float) -> float:  # Estimate multi-cell height
    if not text:
        return line_height
    lines = pdf.multi_cell(width, line_height, text, dry_run=True, output="LINES")
    if isinstance(lines, (list, tuple)):
        return line_height * max(1, len(lines))
    return max(1, math.ceil(len(text) / 90)) * line_height


class ReportPDF(FPDF):  # PDF with custom header/footer styling
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Interview Report"
        self.font_regular = "Helvetica"
        self.font_bold = "Helvetica"
        self.supports_unicode = False

    def use_unicode_fonts(self) -> None:  # Switch to DejaVu when the system fonts are installed
        if not (Path(DEJAVU_SANS).exists() and Path(DEJAVU_SANS_BOLD).exists()):
            return
        self.add_font("DejaVu", "", DEJAVU_SANS)
        self.add_font("DejaVu", "B", DEJAVU_SANS_BOLD)
        self.font_regular = "DejaVu"
        self.font_bold = "DejaVu"
        self.supports_unicode = True

    def clean(self, text: Any) -> str:  # Sanitize text for non-unicode fonts
        value = "" if text is None else str(text)
        if self.supports_unicode:
            return value
        cleaned = value.replace("•", "-").replace("’", "'").replace("“", '"').replace("”", '"')
        return cleaned.encode("latin-1", "ignore").decode("latin-1")

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        if self.page_no() == 1:
            line_height = 8
            self.set_font(self.font_bold, "B", 16)
            trial = self.multi_cell(usable, line_height, self.header_title, dry_run=True, output="LINES")
            lines = len(trial) if isinstance(trial, (list, tuple)) else 1
            banner = 6 + lines * line_height + 4
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, banner, style="F")
            self.set_text_color(255, 255, 255)
            self.set_xy(self.l_margin, 6)
            self.multi_cell(usable, line_height, self.header_title)
            self.set_text_color(*TEXT)
            self.ln(4)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self.font_bold, "B", 12)
            self.multi_cell(usable, 6, self.header_title)
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font(self.font_regular, "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:  # Render styled section title
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 13)
    pdf.cell(0, 9, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Draw two-column metadata
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.cell(col, line, left[0], new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, right[0], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*TEXT)
        pdf.set_font(pdf.font_bold, "B", 11)
        pdf.cell(col, line, pdf.clean(left[1]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.clean(right[1]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _score_text(value: Optional[float], scale: int) -> str:  # Format score for display
    if value is None:
        return "N/A"
    return f"{float(value):g}/{scale}"


def _render_overall(pdf: ReportPDF, session: Session) -> None:  # Overall score box and summary
    result = session.ai_result
    if result is None:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 11)
        pdf.multi_cell(_effective_width(pdf), 6, "This session has not been evaluated yet.")
        pdf.set_text_color(*TEXT)
        pdf.ln(2)
        return
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, pdf.get_y(), _effective_width(pdf), 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, pdf.get_y() + 4)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.cell(_effective_width(pdf) - 12, 6, "Overall Score")
    pdf.set_xy(pdf.l_margin, pdf.get_y() - 2)
    pdf.set_text_color(*ACCENT)
    pdf.set_font(pdf.font_bold, "B", 14)
    pdf.cell(_effective_width(pdf) - 6, 8, _score_text(result.overall.score, 100), align="R")
    pdf.ln(12)
    pdf.set_x(pdf.l_margin)
    pdf.set_text_color(*TEXT)
    pdf.set_font(pdf.font_regular, "", 11)
    pdf.multi_cell(_effective_width(pdf), 6, pdf.clean(result.overall.summary))
    pdf.ln(2)


def _scores_by_index(session: Session) -> dict[int, AnswerScore]:
    if session.ai_result is None:
        return {}
    return {item.index: item for item in session.ai_result.per_answer}


def _render_score_table(pdf: ReportPDF, session: Session) -> None:  # Per-question score table
    headers = ["#", "Difficulty", "Time", "Score", "Feedback"]
    width = _effective_width(pdf)
    widths = [width * 0.06, width * 0.16, width * 0.12, width * 0.12, width * 0.54]
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(pdf.font_bold, "B", 10)
    for idx, title in enumerate(headers):
        pdf.cell(widths[idx], 8, title, align="L", fill=True)
    pdf.ln(8)
    pdf.set_text_color(*TEXT)
    pdf.set_font(pdf.font_regular, "", 10)
    scores = _scores_by_index(session)
    for idx, question in enumerate(session.questions):
        fill = idx % 2 == 0
        if fill:
            pdf.set_fill_color(247, 250, 255)
        scored = scores.get(idx)
        pdf.set_x(pdf.l_margin)
        pdf.cell(widths[0], 7, str(idx + 1), fill=fill)
        pdf.cell(widths[1], 7, question.difficulty.title(), fill=fill)
        pdf.cell(widths[2], 7, f"{question.time_limit}s", fill=fill)
        pdf.cell(widths[3], 7, _score_text(scored.score if scored else None, 10), fill=fill)
        feedback = scored.feedback if scored else "-"
        pdf.cell(widths[4], 7, pdf.clean(feedback)[:90], fill=fill)
        pdf.ln(7)
    pdf.ln(2)


def _render_transcript(pdf: ReportPDF, session: Session) -> None:  # Question and answer blocks
    width = _effective_width(pdf)
    line = 5.5
    if not session.questions:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.multi_cell(width, 6, "No questions recorded for this session.")
        pdf.set_text_color(*TEXT)
        return
    for idx, question in enumerate(session.questions):
        prompt = pdf.clean(f"Q{idx + 1}: {question.text.strip()}")
        answer_text = session.answer_text(idx).strip() or "(no answer)"
        answer = pdf.clean(f"A: {answer_text}")
        pdf.set_font(pdf.font_bold, "B", 10)
        block = _calc_text_height(pdf, width - 4, prompt, line)
        pdf.set_font(pdf.font_regular, "", 10)
        block += _calc_text_height(pdf, width - 4, answer, line) + 6
        if pdf.get_y() + block > pdf.page_break_trigger:
            pdf.add_page()
        origin_y = pdf.get_y()
        pdf.set_fill_color(248, 249, 255)
        pdf.rect(pdf.l_margin, origin_y, width, block, style="F")
        pdf.set_xy(pdf.l_margin + 2, origin_y + 2)
        pdf.set_text_color(*ACCENT)
        pdf.set_font(pdf.font_bold, "B", 10)
        pdf.multi_cell(width - 4, line, prompt)
        pdf.set_x(pdf.l_margin + 2)
        pdf.set_text_color(60, 60, 60)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.multi_cell(width - 4, line, answer)
        bottom = max(pdf.get_y(), origin_y + block - 2)
        pdf.set_draw_color(*RULE)
        pdf.set_line_width(0.2)
        pdf.line(pdf.l_margin, bottom + 1, pdf.l_margin + width, bottom + 1)
        pdf.set_y(bottom + 4)
        pdf.set_text_color(*TEXT)


def generate_session_report_pdf(session: Session) -> bytes:  # Build PDF payload for a stored session
    pdf = ReportPDF()
    pdf.alias_nb_pages()
    pdf.use_unicode_fonts()
    candidate = session.candidate
    pdf.header_title = pdf.clean(f"{candidate.name or 'Candidate'} - Interview Report")
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Session Overview")
    _meta_block(
        pdf,
        [
            ("Session ID", session.id or "-"),
            ("Candidate", candidate.name or "-"),
            ("Email", candidate.email or "-"),
            ("Phone", candidate.phone or "-"),
            ("Created", _format_timestamp(session.created_at)),
            ("Completed", _format_timestamp(session.completed_at)),
        ],
    )

    _section_title(pdf, "Evaluation")
    _render_overall(pdf, session)
    _render_score_table(pdf, session)

    _section_title(pdf, "Question & Answer Transcript")
    _render_transcript(pdf, session)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "generate_session_report_pdf"]
