"""Best-effort contact details pulled from resume text.

Every extractor returns an empty string when nothing matches; the results are
pre-fill suggestions that the candidate confirms or edits before continuing.
"""
from __future__ import annotations

import re
from typing import List

from pydantic import BaseModel

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-z]{2,}", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"(\+?\d{1,3}[\s-]?)?(\d{10}|\d{3}[\s-]\d{3}[\s-]\d{4})")
PROPER_NAME_PATTERN = re.compile(r"^[A-Z][a-zA-Z]+(\s+[A-Z][a-zA-Z]+)+$")
UPPERCASE_NAME_PATTERN = re.compile(r"^[A-Z\s]{4,}$")
NAME_SEARCH_LINES = 3  # name candidates are only taken from the top of the document


class ContactInfo(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""


class ParsedResume(ContactInfo):
    rawText: str = ""
    filename: str = ""


def _lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def looks_like_name(line: str) -> bool:
    return bool(PROPER_NAME_PATTERN.match(line) or UPPERCASE_NAME_PATTERN.match(line))


def extract_email(text: str) -> str:
    match = EMAIL_PATTERN.search(text or "")
    return match.group(0) if match else ""


def extract_phone(text: str) -> str:
    match = PHONE_PATTERN.search(text or "")
    return match.group(0) if match else ""


def extract_name(text: str) -> str:
    """Return a name-looking line from the top of the text, else the first non-blank line."""

    lines = _lines(text)
    if not lines:
        return ""
    for line in lines[:NAME_SEARCH_LINES]:
        if looks_like_name(line):
            return line
    return lines[0]


def extract_contact(text: str) -> ContactInfo:
    return ContactInfo(
        name=extract_name(text),
        email=extract_email(text),
        phone=extract_phone(text),
    )


def parse_resume_text(text: str, filename: str = "") -> ParsedResume:
    contact = extract_contact(text)
    return ParsedResume(**contact.model_dump(), rawText=text or "", filename=filename)


__all__ = [
    "ContactInfo",
    "ParsedResume",
    "extract_contact",
    "extract_email",
    "extract_name",
    "extract_phone",
    "looks_like_name",
    "parse_resume_text",
]
