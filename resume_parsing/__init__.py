from __future__ import annotations  # Re-export resume_parsing public API

from .contacts import (
    ContactInfo,
    ParsedResume,
    extract_contact,
    extract_email,
    extract_name,
    extract_phone,
    parse_resume_text,
)
from .extraction import ExtractionError, InvalidUploadError, detect_kind, extract_text, validate_upload

__all__ = [
    "ContactInfo",
    "ExtractionError",
    "InvalidUploadError",
    "ParsedResume",
    "detect_kind",
    "extract_contact",
    "extract_email",
    "extract_name",
    "extract_phone",
    "extract_text",
    "parse_resume_text",
    "validate_upload",
]
