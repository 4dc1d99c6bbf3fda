from __future__ import annotations  # Session report package exports

from .pdf import generate_session_report_pdf

__all__ = ["generate_session_report_pdf"]
