from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import HttpClient, HttpResponse, UpstreamServiceError, complete, extract_text
from .parsing import ParseFailure, ParseResult, ParsedReply, parse_json_array, parse_json_span

__all__ = [
    "HttpClient",
    "HttpResponse",
    "ParseFailure",
    "ParseResult",
    "ParsedReply",
    "UpstreamServiceError",
    "complete",
    "extract_text",
    "parse_json_array",
    "parse_json_span",
]
