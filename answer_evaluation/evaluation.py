from __future__ import annotations  # Answer scoring with AI reply normalization and heuristic fallback

import logging
import math
from textwrap import dedent
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import TEXT_SERVICE_KEY, resolve_model, settings
from llm_gateway import ParsedReply, ParseResult, UpstreamServiceError, complete, parse_json_span
from observability import log_event, span
from session_store.models import (
    DIFFICULTY_FACTOR,
    AnswerScore,
    EvaluationResult,
    OverallScore,
    Session,
)


logger = logging.getLogger(__name__)

TextService = Callable[[str], str]

MISSING_FEEDBACK = "No feedback provided"
MISSING_OVERALL_SUMMARY = "No overall summary provided"
DEFAULT_OVERALL = OverallScore(score=0, summary="No overall provided")
FALLBACK_SUMMARY = "Fallback heuristic evaluation."


class EvaluationParseError(ValueError):  # AI reply held no usable JSON
    pass


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _finite_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def _numeric(value: Any) -> Optional[float]:  # Accept numbers and numeric strings
    number = _finite_number(value)
    if number is not None:
        return number
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _clamp(value: float, upper: float) -> float:
    return min(max(value, 0.0), upper)


def _index_of(item: Dict[str, Any]) -> Optional[int]:
    raw = item.get("index")
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return None
    return None


def build_prompt(session: Session) -> str:
    """Compose the transcript prompt listing every question and its recorded answer."""

    count = len(session.questions)
    header = dedent(
        f"""
        You are an interviewer assistant. Return ONLY valid JSON.
        Format:
        {{
          "perAnswer": [
            {{"index": <0-based index>, "score": <0-10>, "feedback": "<short feedback>"}}
          ],
          "overall": {{"score": <0-100>, "summary": "<short summary>"}}
        }}
        There must be exactly {count} items in "perAnswer", one for each question.
        """
    ).strip()
    lines = [header, ""]
    for index, question in enumerate(session.questions):
        lines.append(f"Q{index + 1} (index {index}): {question.text}")
        lines.append(f"A{index + 1}: {session.answer_text(index)}")
        lines.append("")
    return "\n".join(lines)


def parse_reply(reply: str) -> ParseResult:
    return parse_json_span(reply)


def _split_items(payload: Any) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:  # Separate per-answer items from the overall item
    per_answer: List[Dict[str, Any]] = []
    overall: Optional[Dict[str, Any]] = None
    if isinstance(payload, list):
        for item in payload:
            if not isinstance(item, dict):
                continue
            if "index" in item or item.get("feedback"):
                per_answer.append(item)
            elif overall is None and _numeric(item.get("score")) is not None:
                overall = item
    elif isinstance(payload, dict):
        raw_items = payload.get("perAnswer")
        if isinstance(raw_items, list):
            per_answer = [item for item in raw_items if isinstance(item, dict)]
        raw_overall = payload.get("overall")
        if isinstance(raw_overall, dict):
            overall = raw_overall
    return per_answer, overall


def _index_map(items: List[Dict[str, Any]], count: int) -> Dict[int, Dict[str, Any]]:
    indexed = [(index, item) for item in items if (index := _index_of(item)) is not None]
    # A batch numbered 1..count with no zero is taken as one-based and shifted as a whole.
    shift = 0
    if indexed and all(1 <= index <= count for index, _ in indexed) and not any(index == 0 for index, _ in indexed):
        shift = 1
    mapping: Dict[int, Dict[str, Any]] = {}
    for index, item in indexed:
        slot = index - shift
        if 0 <= slot < count and slot not in mapping:
            mapping[slot] = item
    return mapping


def normalize_evaluation(payload: Any, question_count: int) -> EvaluationResult:
    """Coerce a decoded AI reply into one score per question index, in order.

    Accepts a flat list mixing per-answer items and an overall item, or an
    object with ``perAnswer``/``overall``. Indices are 0-based; duplicates keep
    the first item seen and out-of-range indices are dropped. Missing slots get
    score 0 and placeholder feedback.
    """

    items, overall_raw = _split_items(payload)
    mapping = _index_map(items, question_count)
    per_answer: List[AnswerScore] = []
    for index in range(question_count):
        raw = mapping.get(index) or {}
        score = _finite_number(raw.get("score"))
        feedback = raw.get("feedback")
        per_answer.append(
            AnswerScore(
                index=index,
                score=_clamp(score, 10.0) if score is not None else 0.0,
                feedback=str(feedback) if feedback else MISSING_FEEDBACK,
            )
        )
    overall = DEFAULT_OVERALL
    if overall_raw is not None:
        overall_score = _numeric(overall_raw.get("score"))
        summary = overall_raw.get("summary")
        overall = OverallScore(
            score=_clamp(overall_score, 100.0) if overall_score is not None else 0.0,
            summary=str(summary) if summary else MISSING_OVERALL_SUMMARY,
        )
    return EvaluationResult(per_answer=per_answer, overall=overall)


def simple_evaluate(session: Session) -> EvaluationResult:
    """Score answers by length and difficulty without any AI call."""

    per_answer: List[AnswerScore] = []
    total = 0
    for index, question in enumerate(session.questions):
        length = len(session.answer_text(index).strip())
        if length == 0:
            base = 0
        elif length < 30:
            base = 3
        elif length < 80:
            base = 6
        else:
            base = 8
        factor = DIFFICULTY_FACTOR.get(question.difficulty, DIFFICULTY_FACTOR["medium"])
        score = min(10, round_half_up(base * factor))
        feedback = "Short or missing detail" if score < 5 else "Reasonable answer"
        per_answer.append(AnswerScore(index=index, score=score, feedback=feedback))
        total += score
    count = len(session.questions)
    overall_score = round_half_up(total / (count * 10) * 100) if count else 0
    return EvaluationResult(
        per_answer=per_answer,
        overall=OverallScore(score=overall_score, summary=FALLBACK_SUMMARY),
    )


def request_evaluation(session: Session, *, service: TextService) -> EvaluationResult:  # AI path; raises on any failure
    with span("evaluate_answers", session.id, questions=len(session.questions)):
        reply = service(build_prompt(session))
    result = parse_reply(reply)
    if not isinstance(result, ParsedReply):
        raise EvaluationParseError(result.reason)
    return normalize_evaluation(result.payload, len(session.questions))


def evaluate_session(session: Session, *, service: Optional[TextService] = None) -> EvaluationResult:
    """Evaluate a session with the AI service, or the heuristic when that is unavailable."""

    source = "fallback"
    result: Optional[EvaluationResult] = None
    if settings.ai_enabled:
        text_service = service or resolve_model(TEXT_SERVICE_KEY, default=complete)
        try:
            result = request_evaluation(session, service=text_service)
            source = "ai"
        except (UpstreamServiceError, EvaluationParseError) as exc:
            logger.warning("Evaluation via AI failed, using fallback: %s", exc)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Evaluation via AI raised unexpectedly, using fallback: %s", exc)
    if result is None:
        result = simple_evaluate(session)
    log_event("evaluation_completed", session.id, source=source, overall=result.overall.score)
    return result


__all__ = [
    "EvaluationParseError",
    "build_prompt",
    "evaluate_session",
    "normalize_evaluation",
    "parse_reply",
    "request_evaluation",
    "round_half_up",
    "simple_evaluate",
]
