from __future__ import annotations  # Re-export session_store public API

from .models import (
    Answer,
    AnswerScore,
    Candidate,
    EvaluationResult,
    OverallScore,
    Question,
    Session,
)
from .store import (
    JsonFileSessionStore,
    PersistenceError,
    SessionRepository,
    SqliteSessionStore,
    build_session_store,
    now_ms,
)

__all__ = [
    "Answer",
    "AnswerScore",
    "Candidate",
    "EvaluationResult",
    "JsonFileSessionStore",
    "OverallScore",
    "PersistenceError",
    "Question",
    "Session",
    "SessionRepository",
    "SqliteSessionStore",
    "build_session_store",
    "now_ms",
]
