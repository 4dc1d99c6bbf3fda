from __future__ import annotations  # Re-export answer_evaluation public API

from session_store.models import AnswerScore, EvaluationResult, OverallScore

from .evaluation import (
    EvaluationParseError,
    build_prompt,
    evaluate_session,
    normalize_evaluation,
    parse_reply,
    simple_evaluate,
)

__all__ = [
    "AnswerScore",
    "EvaluationParseError",
    "EvaluationResult",
    "OverallScore",
    "build_prompt",
    "evaluate_session",
    "normalize_evaluation",
    "parse_reply",
    "simple_evaluate",
]
