from __future__ import annotations  # Session, question, answer and evaluation records

import math
import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Difficulty = Literal["easy", "medium", "hard"]

TIME_BY_DIFFICULTY: Dict[str, int] = {"easy": 20, "medium": 60, "hard": 120}
DIFFICULTY_FACTOR: Dict[str, float] = {"easy": 1.0, "medium": 1.1, "hard": 1.2}


def coerce_difficulty(value: Any) -> Optional[str]:  # Map keyword or prefix to a difficulty band
    raw = str(value or "").strip().lower()
    if not raw:
        return None
    if "easy" in raw or raw.startswith("e"):
        return "easy"
    if "medium" in raw or raw.startswith("m"):
        return "medium"
    if "hard" in raw or raw.startswith("h"):
        return "hard"
    return None


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_seconds(value: Any) -> Optional[int]:  # Positive whole seconds from int, float or numeric-prefixed string
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        seconds = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return None
        seconds = int(match.group(1))
    return seconds if seconds > 0 else None


class WireModel(BaseModel):  # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Question(WireModel):  # Interview question with difficulty band and time limit
    id: str = ""
    text: str = Field(min_length=1)
    difficulty: Difficulty = "medium"
    time_limit: Optional[int] = Field(default=None, alias="timeLimit", gt=0)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value: Any) -> str:  # Accept loose spellings, default to medium
        return coerce_difficulty(value) or "medium"

    @field_validator("time_limit", mode="before")
    @classmethod
    def _positive_seconds(cls, value: Any) -> Optional[int]:  # Unusable limits fall back to the band default
        return parse_seconds(value)

    @model_validator(mode="after")
    def _default_time_limit(self) -> "Question":  # Fill time limit from difficulty band
        if self.time_limit is None:
            self.time_limit = TIME_BY_DIFFICULTY[self.difficulty]
        return self


class Answer(WireModel):  # Candidate answer for one question index
    text: str = ""
    submitted_at: Optional[int] = Field(default=None, alias="submittedAt")

    @field_validator("text", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)


class Candidate(WireModel):  # Confirmed candidate contact details
    name: str = ""
    email: str = ""
    phone: str = ""
    filename: str = ""


class AnswerScore(WireModel):  # Score and feedback for one question index
    index: int = Field(ge=0)
    score: float = Field(ge=0.0, le=10.0)
    feedback: str


class OverallScore(WireModel):  # Aggregate session score
    score: float = Field(ge=0.0, le=100.0)
    summary: str


class EvaluationResult(WireModel):  # Per-answer scores plus overall score
    per_answer: List[AnswerScore] = Field(default_factory=list, alias="perAnswer")
    overall: OverallScore


class Session(WireModel):  # One candidate's interview attempt
    id: Optional[str] = None
    candidate: Candidate = Field(default_factory=Candidate)
    questions: List[Question]
    answers: Dict[int, Answer] = Field(default_factory=dict)
    ai_result: Optional[EvaluationResult] = Field(default=None, alias="aiResult")
    created_at: Optional[int] = Field(default=None, alias="createdAt")
    completed_at: Optional[int] = Field(default=None, alias="completedAt")

    @field_validator("answers", mode="before")
    @classmethod
    def _drop_empty_answers(cls, value: Any) -> Any:  # Sparse map: null slots are treated as absent
        if isinstance(value, dict):
            return {key: item for key, item in value.items() if item is not None}
        if isinstance(value, list):
            return {index: item for index, item in enumerate(value) if item is not None}
        return value

    def answer_text(self, index: int) -> str:
        answer = self.answers.get(index)
        return answer.text if answer is not None else ""

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "Answer",
    "AnswerScore",
    "Candidate",
    "DIFFICULTY_FACTOR",
    "Difficulty",
    "EvaluationResult",
    "OverallScore",
    "Question",
    "Session",
    "TIME_BY_DIFFICULTY",
    "WireModel",
    "coerce_difficulty",
    "parse_seconds",
]
