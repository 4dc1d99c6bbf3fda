"""Pydantic schemas for the interview assistant HTTP API."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from resume_parsing import ParsedResume
from session_store.models import EvaluationResult, Question, Session, WireModel


class ApiResp(BaseModel):
    ok: bool = True


class ErrorResp(BaseModel):
    ok: bool = False
    error: str


class UploadResp(ApiResp):
    parsed: ParsedResume


class GenerateQuestionsReq(WireModel):
    role: Optional[str] = None
    resume_text: str = Field(default="", alias="resumeText")


class QuestionsResp(ApiResp):
    questions: List[Question]


class EvaluationResp(ApiResp):
    ai: EvaluationResult


class SessionResp(ApiResp):
    session: Session


class SessionListResp(ApiResp):
    sessions: List[Session]


class DeleteResp(ApiResp):
    removed: int = Field(ge=0)
