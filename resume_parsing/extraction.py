from __future__ import annotations  # Document text extraction for uploaded resumes

import logging
from io import BytesIO
from typing import Optional

from docx import Document
from pypdf import PdfReader


logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"


class InvalidUploadError(ValueError):  # Upload rejected before extraction (type or size)
    pass


class ExtractionError(RuntimeError):  # Document could not be turned into text
    pass


def detect_kind(filename: str, content_type: Optional[str] = None) -> str:  # Classify an upload as pdf or docx
    name = (filename or "").lower().strip()
    mime = (content_type or "").lower()
    if name.endswith(".pdf") or mime == PDF_MIME:
        return "pdf"
    if name.endswith(".docx") or "word" in mime:
        return "docx"
    raise InvalidUploadError("Unsupported file type. Use PDF or DOCX.")


def validate_upload(filename: str, content: bytes, *, content_type: Optional[str] = None, max_bytes: int) -> str:  # Check size and type, return the document kind
    if not content:
        raise InvalidUploadError("No file uploaded")
    if len(content) > max_bytes:
        raise InvalidUploadError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")
    return detect_kind(filename, content_type)


def pdf_text(content: bytes) -> str:
    reader = PdfReader(BytesIO(content))
    pages = []
    for page in reader.pages:
        text = page.extract_text()
        if text:
            pages.append(text)
    return "\n".join(pages)


def docx_text(content: bytes) -> str:
    document = Document(BytesIO(content))
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


def extract_text(filename: str, content: bytes, *, content_type: Optional[str] = None) -> str:  # Convert an uploaded document to plain text
    kind = detect_kind(filename, content_type)
    try:
        return pdf_text(content) if kind == "pdf" else docx_text(content)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Text extraction failed for %s (%s): %s", filename, kind, exc)
        raise ExtractionError("Failed to parse resume. Try another file.") from exc


__all__ = [
    "ExtractionError",
    "InvalidUploadError",
    "detect_kind",
    "docx_text",
    "extract_text",
    "pdf_text",
    "validate_upload",
]
