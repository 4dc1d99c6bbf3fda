from __future__ import annotations  # Interview flow state models

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from resume_parsing import ParsedResume
from session_store.models import Session


class FlowStage(str, Enum):  # States of the candidate-side interview flow
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    QUESTIONS_GENERATING = "questions_generating"
    READY_TO_START = "ready_to_start"
    IN_PROGRESS = "in_progress"
    FINISHING = "finishing"


class FlowError(RuntimeError):  # Action not allowed in the current stage
    pass


class MissingContactError(FlowError):  # Required contact field left blank
    pass


class FlowSnapshot(BaseModel):  # Serialized in-progress interview used for resume-on-relaunch
    candidate: Optional[ParsedResume] = None
    session: Session
    index: int = Field(default=0, ge=0)
    remaining: int = Field(default=0, ge=0)
    draft: str = ""

    @property
    def resumable(self) -> bool:
        return self.session.completed_at is None and self.index < len(self.session.questions)


__all__ = ["FlowError", "FlowSnapshot", "FlowStage", "MissingContactError"]
