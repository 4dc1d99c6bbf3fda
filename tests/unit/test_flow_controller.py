import pytest

from answer_evaluation import simple_evaluate
from flow_controller import FlowError, FlowStage, InterviewFlow, MissingContactError, SnapshotStore
from question_generation import annotate_questions
from resume_parsing import ParsedResume
from session_store import Answer, EvaluationResult, JsonFileSessionStore, Session


class FakeBackend:
    def __init__(self, store, questions=None):
        self.store = store
        self.questions = questions if questions is not None else annotate_questions(
            [{"text": "Q1", "timeLimit": 200}, {"text": "Q2"}, {"text": "Q3"}]
        )
        self.evaluate_error = None
        self.generated_for = []

    def upload_resume(self, filename, content):
        return ParsedResume(name="Jane Doe", email="jane@x.com", phone="", rawText=content.decode(), filename=filename)

    def generate_questions(self, role, resume_text):
        self.generated_for.append((role, resume_text))
        return list(self.questions)

    def evaluate(self, session: Session) -> EvaluationResult:
        if self.evaluate_error is not None:
            raise self.evaluate_error
        return simple_evaluate(session)

    def submit_session(self, session):
        return self.store.upsert(session)


class Clock:
    def __init__(self):
        self.now = 1000

    def __call__(self):
        self.now += 1
        return self.now


@pytest.fixture
def backend(tmp_path):
    return FakeBackend(JsonFileSessionStore(tmp_path / "sessions.json"))


@pytest.fixture
def snapshots(tmp_path):
    return SnapshotStore(tmp_path / "snapshot.json")


@pytest.fixture
def flow(backend, snapshots):
    return InterviewFlow(backend, snapshots=snapshots, clock=Clock())


def _started(flow):
    flow.upload_resume("cv.pdf", b"Jane Doe resume")
    flow.confirm("Jane Doe", "jane@x.com", "555-123-4567", role="backend")
    flow.start()
    return flow


def test_happy_path_transitions(flow, backend):
    assert flow.stage is FlowStage.IDLE
    parsed = flow.upload_resume("cv.pdf", b"Jane Doe resume")
    assert parsed.name == "Jane Doe"
    assert flow.stage is FlowStage.AWAITING_CONFIRMATION

    session = flow.confirm("Jane Doe", "jane@x.com", "555-123-4567", role="backend")
    assert flow.stage is FlowStage.READY_TO_START
    assert backend.generated_for == [("backend", "Jane Doe resume")]
    assert session.candidate.phone == "555-123-4567"
    assert session.candidate.filename == "cv.pdf"

    countdown = flow.start()
    assert flow.stage is FlowStage.IN_PROGRESS
    assert flow.index == 0
    assert countdown.remaining == 120

    flow.submit_answer("first")
    assert flow.index == 1
    assert flow.countdown.remaining == 60
    flow.submit_answer("second")
    saved = flow.submit_answer("third answer")

    assert flow.stage is FlowStage.IDLE
    assert saved.id
    assert saved.completed_at is not None
    assert saved.ai_result is not None
    assert [saved.answer_text(i) for i in range(3)] == ["first", "second", "third answer"]
    assert backend.store.get_session(saved.id) == saved
    assert flow.last_saved == saved


def test_missing_contact_blocks_confirmation(flow):
    flow.upload_resume("cv.pdf", b"text")
    with pytest.raises(MissingContactError):
        flow.confirm("Jane Doe", "jane@x.com", "   ")
    assert flow.stage is FlowStage.AWAITING_CONFIRMATION


def test_default_role_used(flow, backend):
    flow.upload_resume("cv.pdf", b"text")
    flow.confirm("Jane Doe", "jane@x.com", "555")
    assert backend.generated_for[0][0] == "fullstack"


def test_generation_failure_returns_to_confirmation(flow, backend):
    backend.questions = []
    flow.upload_resume("cv.pdf", b"text")
    with pytest.raises(FlowError):
        flow.confirm("Jane Doe", "jane@x.com", "555")
    assert flow.stage is FlowStage.AWAITING_CONFIRMATION


def test_cancel_from_ready(flow):
    flow.upload_resume("cv.pdf", b"text")
    flow.confirm("Jane Doe", "jane@x.com", "555")
    flow.cancel()
    assert flow.stage is FlowStage.IDLE
    assert flow.session is None


def test_actions_in_wrong_stage_raise(flow):
    with pytest.raises(FlowError):
        flow.start()
    with pytest.raises(FlowError):
        flow.submit_answer("x")


def test_timer_expiry_auto_submits_draft(flow):
    _started(flow)
    flow.update_draft("typed so far")
    for _ in range(119):
        assert flow.tick() is False
    assert flow.index == 0
    assert flow.tick() is True
    assert flow.index == 1
    assert flow.session.answers[0].text == "typed so far"
    assert flow.draft == ""


def test_expiry_with_nothing_typed_records_empty_answer(flow):
    _started(flow)
    for _ in range(120):
        flow.tick()
    assert flow.session.answers[0].text == ""
    assert flow.session.answers[0].submitted_at is not None


def test_auto_submit_twice_keeps_existing_answer(flow):
    _started(flow)
    flow.submit_answer("manual answer")
    first = flow.session.answers[0]
    assert flow.auto_submit(0, "late duplicate") is False
    assert flow.session.answers[0] == first
    assert flow.index == 1


def test_auto_submit_fills_gaps_without_overwriting(flow):
    _started(flow)
    flow.submit_answer("first")
    flow.session.answers[1] = Answer(text="kept")
    assert flow.auto_submit(1, "other") is True
    assert flow.session.answers[1].text == "kept"
    assert flow.session.answers[1].submitted_at is not None
    assert flow.index == 2

    flow.session.answers[2] = Answer(text="", submitted_at=7)
    flow.auto_submit(2, "typed")
    saved = flow.last_saved
    assert saved.answers[2].text == "typed"
    assert saved.answers[2].submitted_at == 7


def test_auto_submit_for_stale_index_does_not_advance(flow):
    _started(flow)
    assert flow.auto_submit(2, "early") is False
    assert flow.index == 0
    assert 2 not in flow.session.answers
    assert flow.auto_submit(9, "nowhere") is False
    assert flow.stage is FlowStage.IN_PROGRESS


def test_last_question_expiry_finishes(flow, backend):
    _started(flow)
    flow.submit_answer("a")
    flow.submit_answer("b")
    for _ in range(120):
        flow.tick()
    assert flow.stage is FlowStage.IDLE
    assert flow.last_saved.answers[2].text == ""
    assert len(backend.store.list_sessions()) == 1


def test_remote_evaluation_failure_uses_local_heuristic(flow, backend):
    backend.evaluate_error = RuntimeError("network down")
    _started(flow)
    for text in ("a", "b", "c"):
        flow.submit_answer(text)
    assert flow.last_saved.ai_result.overall.summary == "Fallback heuristic evaluation."


def test_save_failure_keeps_session_in_progress(flow, backend, snapshots):
    def broken(session):
        raise OSError("disk full")

    _started(flow)
    flow.submit_answer("a")
    flow.submit_answer("b")
    backend.submit_session = broken
    with pytest.raises(FlowError):
        flow.submit_answer("c")
    assert flow.stage is FlowStage.IN_PROGRESS
    assert flow.session.answers[2].text == "c"
    assert snapshots.path.exists()

    backend.submit_session = backend.store.upsert
    saved = flow.finish()
    assert flow.stage is FlowStage.IDLE
    assert saved.answer_text(2) == "c"


def test_snapshot_written_and_resumed(backend, snapshots):
    flow = _started(InterviewFlow(backend, snapshots=snapshots, clock=Clock()))
    flow.submit_answer("first")
    flow.update_draft("half an answer")
    for _ in range(5):
        flow.tick()

    relaunched = InterviewFlow(backend, snapshots=snapshots, clock=Clock())
    assert relaunched.has_resumable_snapshot()
    snapshot = relaunched.resume()
    assert snapshot.index == 1
    assert relaunched.stage is FlowStage.IN_PROGRESS
    assert relaunched.index == 1
    assert relaunched.draft == "half an answer"
    assert relaunched.countdown.remaining == 55
    assert relaunched.session.answer_text(0) == "first"
    assert relaunched.parsed.phone == "555-123-4567"


def test_finish_clears_snapshot(flow, snapshots):
    _started(flow)
    assert snapshots.path.exists()
    for text in ("a", "b", "c"):
        flow.submit_answer(text)
    assert not snapshots.path.exists()
    assert not flow.has_resumable_snapshot()


def test_discard_snapshot(flow, backend, snapshots):
    _started(flow)
    relaunched = InterviewFlow(backend, snapshots=snapshots)
    relaunched.discard_snapshot()
    assert not relaunched.has_resumable_snapshot()
    with pytest.raises(FlowError):
        relaunched.resume()


def test_future_question_keeps_its_own_expiry_timestamp(backend, snapshots):
    clock = Clock()
    flow = _started(InterviewFlow(backend, snapshots=snapshots, clock=clock))
    flow.auto_submit(2, "")
    flow.submit_answer("a")
    flow.submit_answer("b")
    flow.update_draft("real answer")
    clock.now = 5000
    for _ in range(120):
        flow.tick()
    answer = flow.last_saved.answers[2]
    assert answer.text == "real answer"
    assert answer.submitted_at > 5000


def test_resume_with_expired_timer_auto_submits(backend, snapshots):
    flow = _started(InterviewFlow(backend, snapshots=snapshots, clock=Clock()))
    flow.submit_answer("first")
    flow.update_draft("unfinished")
    snapshot = snapshots.load()
    snapshots.save(snapshot.model_copy(update={"remaining": 0}))

    relaunched = InterviewFlow(backend, snapshots=snapshots, clock=Clock())
    relaunched.resume()
    assert relaunched.index == 2
    assert relaunched.session.answer_text(1) == "unfinished"
    assert relaunched.countdown.remaining == 120
