from __future__ import annotations  # AI text service request gateway

import json
import logging
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

import httpx

from config import LlmRoute, settings, text_route


logger = logging.getLogger(__name__)  # Module logger setup


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class UpstreamServiceError(RuntimeError):  # Transport, status, or payload failure from the AI service
    pass


def complete(
    prompt: str,
    *,
    cfg: Optional[LlmRoute] = None,
    client: Optional[HttpClient] = None,
) -> str:  # Send a single prompt and return the raw reply text
    route = cfg or text_route(settings)
    if not route.api_key:
        raise UpstreamServiceError("AI service key not configured")
    payload: Dict[str, Any] = {"contents": [{"parts": [{"text": str(prompt)}]}]}
    headers = {"Content-Type": "application/json", "x-goog-api-key": route.api_key}
    headers.update(route.extra_headers)
    preview = _preview(prompt)
    logger.info("AI request send route=%s model=%s preview=%s", route.name, route.model, preview)
    try:
        response, close_cb = _post(route.url, payload, headers, route.timeout_s, client)
    except Exception as exc:  # noqa: BLE001
        logger.warning("AI transport failure: %s", exc)
        raise UpstreamServiceError("AI transport failed") from exc
    try:
        if response.status_code >= 400:
            logger.warning("AI error status: %s", response.status_code)
            raise UpstreamServiceError(f"AI service returned status {response.status_code}")
        try:
            data = response.json()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Invalid JSON payload from AI service: %s", exc)
            raise UpstreamServiceError("AI payload was not JSON") from exc
    finally:
        _close_safely(close_cb)
    text = extract_text(data)
    logger.info("AI request done route=%s model=%s chars=%d", route.name, route.model, len(text))
    return text


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        return client.post(url, json=payload, headers=headers, timeout=timeout), None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _preview(prompt: str) -> str:  # Build preview string for logging
    for line in str(prompt).splitlines():
        text = line.strip()
        if text:
            return text[:117] + "..." if len(text) > 120 else text
    return ""


def extract_text(data: Any) -> str:  # Pull reply text out of a generateContent (or chat-completions) payload
    if isinstance(data, dict):
        candidates = data.get("candidates")
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
            content = candidates[0].get("content")
            parts = content.get("parts") if isinstance(content, dict) else None
            if isinstance(parts, list):
                texts = [part.get("text") for part in parts if isinstance(part, dict)]
                return "\n".join(text for text in texts if isinstance(text, str))
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
    return json.dumps(data)
