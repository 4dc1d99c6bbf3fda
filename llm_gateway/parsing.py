"""Tolerant extraction of JSON payloads from free-text AI replies."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Union

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedReply:
    """JSON value decoded from an AI reply."""

    payload: Any


@dataclass(frozen=True)
class ParseFailure:
    """Reason an AI reply could not be decoded."""

    reason: str


ParseResult = Union[ParsedReply, ParseFailure]


def strip_fence(text: str) -> str:
    """Return the body of the first fenced ```json block, or the text unchanged."""

    match = _FENCED_JSON.search(text or "")
    return match.group(1) if match else (text or "")


def parse_json_array(text: str) -> ParseResult:
    """Decode a JSON array, starting at the first ``[`` and tolerating trailing noise."""

    body = strip_fence(text)
    start = body.find("[")
    if start < 0:
        return ParseFailure("no JSON array found")
    try:
        payload, _ = json.JSONDecoder().raw_decode(body, start)
    except json.JSONDecodeError as exc:
        return ParseFailure(f"invalid JSON array: {exc.msg}")
    if not isinstance(payload, list):
        return ParseFailure("reply is not a JSON array")
    return ParsedReply(payload)


def parse_json_span(text: str) -> ParseResult:
    """Decode the span from the first opening bracket to its last matching closing bracket."""

    body = strip_fence(text)
    for index, char in enumerate(body):
        if char not in "{[":
            continue
        closing = "}" if char == "{" else "]"
        end = body.rfind(closing)
        if end <= index:
            continue
        try:
            return ParsedReply(json.loads(body[index : end + 1]))
        except json.JSONDecodeError as exc:
            return ParseFailure(f"invalid JSON: {exc.msg}")
    return ParseFailure("no JSON object or array found")


__all__ = [
    "ParseFailure",
    "ParseResult",
    "ParsedReply",
    "parse_json_array",
    "parse_json_span",
    "strip_fence",
]
