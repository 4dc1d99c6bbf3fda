"""FastAPI routes for resume parsing, questions, evaluation and session storage."""
from __future__ import annotations

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile
from fastapi.concurrency import run_in_threadpool

from answer_evaluation import evaluate_session
from api.schemas import (
    ApiResp,
    DeleteResp,
    EvaluationResp,
    GenerateQuestionsReq,
    QuestionsResp,
    SessionListResp,
    SessionResp,
    UploadResp,
)
from config.settings import settings
from observability import log_event
from question_generation import generate_questions
from resume_parsing import ExtractionError, InvalidUploadError, extract_text, parse_resume_text, validate_upload
from session_reports import generate_session_report_pdf
from session_store import PersistenceError, Session, SessionRepository, build_session_store


logger = logging.getLogger(__name__)

router = APIRouter()


def get_session_store() -> SessionRepository:
    try:
        return build_session_store(settings)
    except PersistenceError as exc:
        logger.exception("Session store unavailable")
        raise HTTPException(status_code=500, detail="Session storage unavailable") from exc


def _overall_score(session: Session) -> float:
    return session.ai_result.overall.score if session.ai_result is not None else 0.0


def _matches(session: Session, needle: str) -> bool:
    candidate = session.candidate
    summary = session.ai_result.overall.summary if session.ai_result is not None else ""
    haystack = (candidate.name, candidate.email, candidate.phone, summary)
    return any(needle in (value or "").lower() for value in haystack)


def _dashboard_view(sessions: List[Session], q: Optional[str], sort: str) -> List[Session]:  # Dedupe, filter and order for the dashboard
    seen: set[str] = set()
    unique: List[Session] = []
    for item in sessions:
        if item.id and item.id not in seen:
            seen.add(item.id)
            unique.append(item)
    needle = (q or "").strip().lower()
    if needle:
        unique = [item for item in unique if _matches(item, needle)]
    if sort == "score":
        # Stable sort keeps createdAt-descending order among equal scores.
        unique = sorted(unique, key=_overall_score, reverse=True)
    return unique


@router.post("/upload-resume", response_model=UploadResp)
async def upload_resume(resume: Optional[UploadFile] = File(None)) -> UploadResp:
    if resume is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    content = await resume.read(settings.MAX_UPLOAD_BYTES + 1)  # one byte past the limit is enough to reject
    filename = resume.filename or ""
    try:
        validate_upload(filename, content, content_type=resume.content_type, max_bytes=settings.MAX_UPLOAD_BYTES)
        raw_text = await run_in_threadpool(extract_text, filename, content, content_type=resume.content_type)
    except InvalidUploadError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ExtractionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    parsed = parse_resume_text(raw_text, filename)
    log_event("resume_parsed", None, filename=filename, chars=len(raw_text))
    return UploadResp(parsed=parsed)


@router.post("/generate-questions", response_model=QuestionsResp)
def create_questions(payload: GenerateQuestionsReq) -> QuestionsResp:
    questions = generate_questions(payload.role, payload.resume_text)
    return QuestionsResp(questions=questions)


@router.post("/evaluate-answers", response_model=EvaluationResp)
def evaluate_answers(payload: Session) -> EvaluationResp:
    return EvaluationResp(ai=evaluate_session(payload))


@router.post("/submit-session", response_model=SessionResp, response_model_exclude_none=True)
def submit_session(payload: Session, store: SessionRepository = Depends(get_session_store)) -> SessionResp:
    try:
        saved = store.upsert(payload)
    except PersistenceError as exc:
        logger.exception("Unable to persist session")
        raise HTTPException(status_code=500, detail="Unable to save session") from exc
    log_event("session_upserted", saved.id)
    return SessionResp(session=saved)


@router.get("/sessions", response_model=SessionListResp, response_model_exclude_none=True)
def list_sessions(
    q: Optional[str] = Query(default=None),
    sort: Literal["recent", "score"] = Query(default="recent"),
    store: SessionRepository = Depends(get_session_store),
) -> SessionListResp:
    try:
        sessions = store.list_sessions()
    except PersistenceError as exc:
        logger.exception("Unable to list sessions")
        raise HTTPException(status_code=500, detail="Unable to load sessions") from exc
    return SessionListResp(sessions=_dashboard_view(sessions, q, sort))


def _load_or_404(store: SessionRepository, session_id: str) -> Session:
    try:
        session = store.get_session(session_id)
    except PersistenceError as exc:
        logger.exception("Unable to load session %s", session_id)
        raise HTTPException(status_code=500, detail="Unable to load session") from exc
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.get("/sessions/{session_id}", response_model=SessionResp, response_model_exclude_none=True)
def fetch_session(session_id: str, store: SessionRepository = Depends(get_session_store)) -> SessionResp:
    return SessionResp(session=_load_or_404(store, session_id))


@router.get("/sessions/{session_id}/report")
def fetch_session_report(session_id: str, store: SessionRepository = Depends(get_session_store)) -> Response:
    session = _load_or_404(store, session_id)
    pdf_bytes = generate_session_report_pdf(session)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="interview-{session_id}.pdf"'},
    )


@router.delete("/sessions/{session_id}", response_model=DeleteResp)
def delete_session(session_id: str, store: SessionRepository = Depends(get_session_store)) -> DeleteResp:
    try:
        removed = store.delete_session(session_id)
    except PersistenceError as exc:
        logger.exception("Unable to delete session %s", session_id)
        raise HTTPException(status_code=500, detail="Unable to delete session") from exc
    log_event("session_deleted", session_id, removed=removed)
    return DeleteResp(removed=removed)


@router.get("/health", response_model=ApiResp)
def health() -> ApiResp:
    return ApiResp()
