from __future__ import annotations  # Service access used by the interview flow

from typing import Any, Dict, List, Optional, Protocol

import httpx

from answer_evaluation import evaluate_session
from question_generation import generate_questions
from resume_parsing import ParsedResume, extract_text, parse_resume_text, validate_upload
from session_store import EvaluationResult, Question, Session, SessionRepository
from config.settings import settings


class InterviewBackend(Protocol):  # Operations the flow needs from the server side
    def upload_resume(self, filename: str, content: bytes) -> ParsedResume: ...

    def generate_questions(self, role: str, resume_text: str) -> List[Question]: ...

    def evaluate(self, session: Session) -> EvaluationResult: ...

    def submit_session(self, session: Session) -> Session: ...


class LocalInterviewBackend:  # Calls the services in-process
    def __init__(self, store: SessionRepository) -> None:
        self._store = store

    def upload_resume(self, filename: str, content: bytes) -> ParsedResume:
        validate_upload(filename, content, max_bytes=settings.MAX_UPLOAD_BYTES)
        return parse_resume_text(extract_text(filename, content), filename)

    def generate_questions(self, role: str, resume_text: str) -> List[Question]:
        return generate_questions(role, resume_text)

    def evaluate(self, session: Session) -> EvaluationResult:
        return evaluate_session(session)

    def submit_session(self, session: Session) -> Session:
        return self._store.upsert(session)


class BackendError(RuntimeError):  # Server answered with ok=false or an error status
    pass


class HttpInterviewBackend:  # Talks to a running API server over HTTP
    def __init__(self, base_url: str, *, client: Optional[httpx.Client] = None, timeout: float = 30.0) -> None:
        self._client = client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _unwrap(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise BackendError(f"Unexpected response ({response.status_code})") from exc
        if response.status_code >= 400 or not data.get("ok"):
            raise BackendError(str(data.get("error") or f"Request failed ({response.status_code})"))
        return data

    def upload_resume(self, filename: str, content: bytes) -> ParsedResume:
        response = self._client.post("/upload-resume", files={"resume": (filename, content)})
        return ParsedResume.model_validate(self._unwrap(response)["parsed"])

    def generate_questions(self, role: str, resume_text: str) -> List[Question]:
        response = self._client.post("/generate-questions", json={"role": role, "resumeText": resume_text})
        return [Question.model_validate(item) for item in self._unwrap(response)["questions"]]

    def evaluate(self, session: Session) -> EvaluationResult:
        response = self._client.post("/evaluate-answers", json=session.to_wire())
        return EvaluationResult.model_validate(self._unwrap(response)["ai"])

    def submit_session(self, session: Session) -> Session:
        response = self._client.post("/submit-session", json=session.to_wire())
        return Session.model_validate(self._unwrap(response)["session"])


__all__ = ["BackendError", "HttpInterviewBackend", "InterviewBackend", "LocalInterviewBackend"]
