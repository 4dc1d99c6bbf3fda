"""Candidate-side interview state machine.

The flow owns one in-progress :class:`Session` at a time. Each question gets its
own :class:`Countdown`; the countdown's single expiry event and any safety-net
caller both go through :meth:`InterviewFlow.auto_submit`, which only ever fills
gaps in an existing answer and only advances when the index is still current.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from answer_evaluation import simple_evaluate
from config.settings import settings
from observability import log_event
from resume_parsing import ParsedResume
from session_store import Answer, Candidate, EvaluationResult, Session, now_ms

from .backend import InterviewBackend
from .countdown import Countdown
from .models import FlowError, FlowSnapshot, FlowStage, MissingContactError
from .snapshots import SnapshotStore


logger = logging.getLogger(__name__)

Clock = Callable[[], int]


class InterviewFlow:
    def __init__(
        self,
        backend: InterviewBackend,
        *,
        snapshots: Optional[SnapshotStore] = None,
        clock: Clock = now_ms,
        default_role: Optional[str] = None,
        max_question_seconds: Optional[int] = None,
    ) -> None:
        self._backend = backend
        self._snapshots = snapshots
        self._clock = clock
        self._default_role = default_role or settings.DEFAULT_ROLE
        self._max_seconds = max_question_seconds or settings.MAX_QUESTION_SECONDS
        self.stage = FlowStage.IDLE
        self.parsed: Optional[ParsedResume] = None
        self.session: Optional[Session] = None
        self.index = 0
        self.draft = ""
        self.countdown: Optional[Countdown] = None
        self.last_saved: Optional[Session] = None

    def _require(self, *stages: FlowStage) -> None:
        if self.stage not in stages:
            allowed = ", ".join(stage.value for stage in stages)
            raise FlowError(f"Action not allowed while {self.stage.value} (expected {allowed})")

    def _move(self, stage: FlowStage) -> None:
        previous = self.stage
        self.stage = stage
        session_id = self.session.id if self.session else None
        log_event("flow_transition", session_id, from_state=previous.value, to_state=stage.value, index=self.index)

    def _reset(self) -> None:
        if self.countdown is not None:
            self.countdown.cancel()
        self.countdown = None
        self.parsed = None
        self.session = None
        self.index = 0
        self.draft = ""

    def _persist(self) -> None:  # Snapshot every change while a session is in progress
        if self._snapshots is None or self.session is None or self.stage is not FlowStage.IN_PROGRESS:
            return
        remaining = self.countdown.remaining if self.countdown is not None else 0
        self._snapshots.save(
            FlowSnapshot(
                candidate=self.parsed,
                session=self.session,
                index=self.index,
                remaining=remaining,
                draft=self.draft,
            )
        )

    def seconds_for(self, index: int) -> int:  # Countdown length for a question, capped
        question = self._questions[index]
        return min(question.time_limit or self._max_seconds, self._max_seconds)

    @property
    def _questions(self):
        if self.session is None:
            raise FlowError("No interview session loaded")
        return self.session.questions

    @property
    def question_count(self) -> int:
        return len(self.session.questions) if self.session is not None else 0

    @property
    def current_question(self):
        if self.stage is not FlowStage.IN_PROGRESS:
            return None
        return self._questions[self.index]

    def _arm(self, index: int, seconds: Optional[int] = None) -> None:
        if self.countdown is not None:
            self.countdown.cancel()
        countdown = Countdown(seconds if seconds is not None else self.seconds_for(index), question_index=index)
        countdown.subscribe(self._on_expiry)
        self.countdown = countdown

    def _on_expiry(self, countdown: Countdown) -> None:
        self.auto_submit(countdown.question_index, self.draft)

    def load_parsed(self, parsed: ParsedResume) -> ParsedResume:
        self._require(FlowStage.IDLE)
        self.parsed = parsed
        self._move(FlowStage.AWAITING_CONFIRMATION)
        return parsed

    def upload_resume(self, filename: str, content: bytes) -> ParsedResume:
        self._require(FlowStage.IDLE)
        return self.load_parsed(self._backend.upload_resume(filename, content))

    def confirm(self, name: str, email: str, phone: str, role: Optional[str] = None) -> Session:
        """Accept the edited contact fields and generate the question set."""

        self._require(FlowStage.AWAITING_CONFIRMATION)
        name, email, phone = (value.strip() for value in (name or "", email or "", phone or ""))
        if not (name and email and phone):
            raise MissingContactError("Please fill name, email, and phone before starting.")
        parsed = self.parsed or ParsedResume()
        self.parsed = parsed.model_copy(update={"name": name, "email": email, "phone": phone})
        self._move(FlowStage.QUESTIONS_GENERATING)
        try:
            questions = self._backend.generate_questions(role or self._default_role, parsed.rawText)
        except Exception as exc:
            self.stage = FlowStage.AWAITING_CONFIRMATION
            raise FlowError("Failed to generate questions") from exc
        if not questions:
            self.stage = FlowStage.AWAITING_CONFIRMATION
            raise FlowError("Failed to generate questions")
        self.session = Session(
            candidate=Candidate(name=name, email=email, phone=phone, filename=parsed.filename),
            questions=questions,
        )
        self._move(FlowStage.READY_TO_START)
        return self.session

    def cancel(self) -> None:
        self._require(FlowStage.AWAITING_CONFIRMATION, FlowStage.READY_TO_START)
        self._reset()
        self._move(FlowStage.IDLE)

    def start(self) -> Countdown:
        self._require(FlowStage.READY_TO_START)
        self.index = 0
        self.draft = ""
        self._move(FlowStage.IN_PROGRESS)
        self._arm(0)
        self._persist()
        return self.countdown

    def update_draft(self, text: str) -> None:
        self._require(FlowStage.IN_PROGRESS)
        self.draft = text or ""
        self._persist()

    def _record(self, index: int, text: str) -> Answer:
        existing = self.session.answers.get(index)
        if existing is None:
            answer = Answer(text=text, submitted_at=self._clock())
        else:
            answer = Answer(
                text=existing.text or text,
                submitted_at=existing.submitted_at or self._clock(),
            )
        self.session.answers[index] = answer
        log_event("answer_recorded", self.session.id, index=index, chars=len(answer.text), auto=True)
        return answer

    def submit_answer(self, text: Optional[str] = None) -> Optional[Session]:
        """Manual submit of the current question; returns the saved session after the last one."""

        self._require(FlowStage.IN_PROGRESS)
        index = self.index
        answer = Answer(text=self.draft if text is None else text, submitted_at=self._clock())
        self.session.answers[index] = answer
        log_event("answer_recorded", self.session.id, index=index, chars=len(answer.text), auto=False)
        return self._advance()

    def auto_submit(self, index: int, text: str = "") -> bool:
        """Record whatever was typed for ``index``; safe to call more than once.

        Questions not reached yet are ignored.

        Returns True when this call advanced the flow.
        """

        if self.stage is not FlowStage.IN_PROGRESS or self.session is None:
            return False
        if not 0 <= index <= min(self.index, len(self.session.questions) - 1):
            return False
        self._record(index, text or "")
        if index != self.index:
            self._persist()
            return False
        self._advance()
        return True

    def tick(self) -> bool:  # One second elapsed on the active question
        if self.stage is not FlowStage.IN_PROGRESS or self.countdown is None:
            return False
        expired = self.countdown.tick()
        if not expired:
            self._persist()
        return expired

    def _advance(self) -> Optional[Session]:
        if self.countdown is not None:
            self.countdown.cancel()
        self.draft = ""
        if self.index + 1 < len(self.session.questions):
            self.index += 1
            self._arm(self.index)
            self._persist()
            return None
        return self.finish()

    def _evaluate(self, session: Session) -> EvaluationResult:
        try:
            return self._backend.evaluate(session)
        except Exception as exc:
            logger.warning("Remote evaluation failed, using local heuristic: %s", exc)
            return simple_evaluate(session)

    def finish(self) -> Session:
        """Evaluate and persist the session, then return to idle."""

        self._require(FlowStage.IN_PROGRESS, FlowStage.FINISHING)
        if self.countdown is not None:
            self.countdown.cancel()
        self._move(FlowStage.FINISHING)
        result = self._evaluate(self.session)
        completed = self.session.model_copy(update={"ai_result": result, "completed_at": self._clock()})
        try:
            saved = self._backend.submit_session(completed)
        except Exception as exc:
            self.stage = FlowStage.IN_PROGRESS
            raise FlowError("Failed to save session") from exc
        if self._snapshots is not None:
            self._snapshots.clear()
        self.last_saved = saved
        self._reset()
        self._move(FlowStage.IDLE)
        return saved

    def has_resumable_snapshot(self) -> bool:
        return self._snapshots is not None and self._snapshots.has_resumable()

    def resume(self) -> FlowSnapshot:
        self._require(FlowStage.IDLE)
        snapshot = self._snapshots.load() if self._snapshots is not None else None
        if snapshot is None:
            raise FlowError("No saved session to resume")
        self.parsed = snapshot.candidate
        self.session = snapshot.session
        self.index = snapshot.index
        self.draft = snapshot.draft
        self._move(FlowStage.IN_PROGRESS)
        self._arm(self.index, min(snapshot.remaining, self.seconds_for(self.index)))
        if self.countdown.remaining == 0:
            self.countdown.tick()
        self._persist()
        return snapshot

    def discard_snapshot(self) -> None:
        if self._snapshots is not None:
            self._snapshots.clear()


__all__ = ["Clock", "InterviewFlow"]
