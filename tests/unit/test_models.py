import pytest
from pydantic import ValidationError

from session_store import Answer, Question, Session
from session_store.models import coerce_difficulty, parse_seconds


def test_question_defaults_time_limit_from_band():
    assert Question(text="x", difficulty="hard").time_limit == 120
    assert Question(text="x").difficulty == "medium"
    assert Question(text="x", difficulty="Very HARD").difficulty == "hard"


def test_question_requires_text():
    with pytest.raises(ValidationError):
        Question(text="")


@pytest.mark.parametrize(
    "value, expected",
    [(30, 30), (30.7, 30), ("45 seconds", 45), ("0", None), (-5, None), (True, None), ("soon", None), (None, None)],
)
def test_parse_seconds(value, expected):
    assert parse_seconds(value) == expected


def test_coerce_difficulty_prefixes():
    assert coerce_difficulty("E") == "easy"
    assert coerce_difficulty("med") == "medium"
    assert coerce_difficulty("unknown") is None


def test_session_accepts_sparse_answer_list():
    session = Session.model_validate(
        {
            "questions": [{"text": "a"}, {"text": "b"}, {"text": "c"}],
            "answers": [{"text": "first"}, None, {"text": "third", "submittedAt": 9}],
        }
    )
    assert set(session.answers) == {0, 2}
    assert session.answer_text(1) == ""
    assert session.answers[2] == Answer(text="third", submitted_at=9)


def test_session_requires_questions():
    with pytest.raises(ValidationError):
        Session.model_validate({"answers": {}})


def test_to_wire_uses_camel_case_and_drops_nulls():
    wire = Session(id="s1", questions=[Question(text="a")], created_at=10).to_wire()
    assert wire["createdAt"] == 10
    assert "completedAt" not in wire
    assert "aiResult" not in wire
    assert wire["questions"][0]["timeLimit"] == 60
