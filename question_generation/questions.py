from __future__ import annotations  # Role-specific interview question generation

import logging
import math
from textwrap import dedent
from typing import Any, Callable, Dict, List, Optional, Sequence

from config import TEXT_SERVICE_KEY, resolve_model, settings
from llm_gateway import ParsedReply, UpstreamServiceError, complete, parse_json_array
from observability import log_event, span
from session_store.models import TIME_BY_DIFFICULTY, Question, coerce_difficulty, parse_seconds


logger = logging.getLogger(__name__)

TextService = Callable[[str], str]

FALLBACK_QUESTIONS: List[Dict[str, Any]] = [
    {"text": "What is JSX and why do we use it in React?"},
    {"text": "Explain the difference between props and state in React."},
    {"text": "How would you manage side-effects in a React application?"},
    {"text": "Describe how you would design an authentication flow for a React + Node.js app."},
    {"text": "How would you optimize a slow React app that re-renders too often?"},
    {"text": "Explain how you would design a scalable REST API for a job-matching platform."},
]

TEXT_FIELDS = ("text", "question", "prompt")
DIFFICULTY_FIELDS = ("difficulty", "level")
TIME_FIELDS = ("timeLimit", "time_seconds", "seconds", "time")


def difficulty_for_position(index: int, total: int) -> str:  # Positional band when the item names none
    if total == 6:
        if index < 2:
            return "easy"
        if index < 4:
            return "medium"
        return "hard"
    if index < math.ceil(total / 3):
        return "easy"
    if index < math.ceil(2 * total / 3):
        return "medium"
    return "hard"


def _first_text(item: Dict[str, Any]) -> str:
    for field in TEXT_FIELDS:
        value = item.get(field)
        if value is not None and str(value).strip():
            return str(value).strip()
    content = item.get("content")
    if isinstance(content, dict):
        parts = content.get("parts")
        if isinstance(parts, list) and parts and isinstance(parts[0], dict):
            value = parts[0].get("text")
            if value is not None and str(value).strip():
                return str(value).strip()
    return ""


def _first_present(item: Dict[str, Any], fields: Sequence[str]) -> Any:
    for field in fields:
        value = item.get(field)
        if value:
            return value
    return None


def annotate_question(item: Any, index: int, total: int) -> Question:  # Turn one raw item into a Question
    raw: Dict[str, Any] = item if isinstance(item, dict) else {"text": item} if isinstance(item, str) else {}
    text = _first_text(raw) or f"(question {index + 1})"
    difficulty = coerce_difficulty(_first_present(raw, DIFFICULTY_FIELDS)) or difficulty_for_position(index, total)
    time_limit = parse_seconds(_first_present(raw, TIME_FIELDS)) or TIME_BY_DIFFICULTY[difficulty]
    raw_id = raw.get("id")
    question_id = str(raw_id).strip() if raw_id not in (None, "") else f"q-{index}"
    return Question(id=question_id, text=text, difficulty=difficulty, time_limit=time_limit)


def annotate_questions(items: Sequence[Any]) -> List[Question]:
    """Normalize raw question items (AI or fallback) into well-formed questions.

    Always returns exactly ``len(items)`` questions and never raises.
    """

    total = len(items)
    return [annotate_question(item, index, total) for index, item in enumerate(items)]


def build_prompt(role: str, resume_text: str, count: int = 6) -> str:  # Build the generation prompt
    per_band = max(count // 3, 1)
    return dedent(
        f"""
        You are an interviewer assistant. Given a role ("{role}") and a candidate resume (plain text), generate exactly a JSON array of {count} question objects and return JSON only.
        Each object should have:
        - "text": a single-line concise question (one sentence)
        - "difficulty": "easy" | "medium" | "hard"
        - optionally "timeLimit": integer seconds

        Instruction: produce {per_band} easy, then {per_band} medium, then {per_band} hard.
        Resume:
        """
    ).strip() + "\n" + (resume_text or "")


def request_questions(role: str, resume_text: str, *, service: TextService, count: int = 6) -> List[Any]:  # Ask the AI service, empty list on any failure
    try:
        with span("generate_questions", role=role):
            reply = service(build_prompt(role, resume_text, count))
    except UpstreamServiceError as exc:
        logger.warning("Question generation call failed, using fallback: %s", exc)
        return []
    except Exception as exc:  # noqa: BLE001
        logger.warning("Question generation call raised unexpectedly, using fallback: %s", exc)
        return []
    result = parse_json_array(reply)
    if not isinstance(result, ParsedReply):
        logger.warning("Question reply parse failed (%s). Preview: %s", result.reason, (reply or "")[:500])
        return []
    return result.payload


def generate_questions(
    role: Optional[str],
    resume_text: str,
    *,
    service: Optional[TextService] = None,
) -> List[Question]:
    """Generate annotated questions for a role, falling back to the static set."""

    role_name = (role or "").strip() or settings.DEFAULT_ROLE
    raw_items: List[Any] = []
    source = "fallback"
    if settings.ai_enabled:
        text_service = service or resolve_model(TEXT_SERVICE_KEY, default=complete)
        raw_items = request_questions(role_name, resume_text or "", service=text_service, count=settings.QUESTION_COUNT)
        if raw_items:
            source = "ai"
    if not raw_items:
        raw_items = FALLBACK_QUESTIONS
    questions = annotate_questions(raw_items)
    log_event("questions_generated", None, source=source, count=len(questions))
    return questions


__all__ = [
    "FALLBACK_QUESTIONS",
    "annotate_question",
    "annotate_questions",
    "build_prompt",
    "difficulty_for_position",
    "generate_questions",
    "request_questions",
]
