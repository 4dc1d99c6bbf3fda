from __future__ import annotations  # Re-export question_generation public API

from .questions import (  # noqa: F401 F403
    FALLBACK_QUESTIONS,
    annotate_questions,
    build_prompt,
    difficulty_for_position,
    generate_questions,
)

__all__ = [
    "FALLBACK_QUESTIONS",
    "annotate_questions",
    "build_prompt",
    "difficulty_for_position",
    "generate_questions",
]
