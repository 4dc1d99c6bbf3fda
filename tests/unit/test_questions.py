import pytest

from llm_gateway import UpstreamServiceError
from question_generation import FALLBACK_QUESTIONS, annotate_questions, build_prompt, generate_questions
from question_generation.questions import annotate_question


def _bands(questions):
    return [question.difficulty for question in questions]


def test_fallback_when_key_absent():
    questions = generate_questions("fullstack", "some resume")
    assert [question.text for question in questions] == [item["text"] for item in FALLBACK_QUESTIONS]
    assert _bands(questions) == ["easy", "easy", "medium", "medium", "hard", "hard"]
    assert [question.time_limit for question in questions] == [20, 20, 60, 60, 120, 120]


def test_annotation_is_idempotent():
    first = annotate_questions(FALLBACK_QUESTIONS)
    again = annotate_questions([question.model_dump(by_alias=True) for question in first])
    assert len(again) == len(first) == 6
    assert _bands(again) == _bands(first)
    assert [question.time_limit for question in again] == [question.time_limit for question in first]
    assert [question.id for question in again] == [question.id for question in first]


@pytest.mark.parametrize(
    "count, expected",
    [
        (3, ["easy", "medium", "hard"]),
        (4, ["easy", "easy", "medium", "hard"]),
        (1, ["easy"]),
    ],
)
def test_positional_bands_for_other_sizes(count, expected):
    questions = annotate_questions([{"text": f"q{i}"} for i in range(count)])
    assert _bands(questions) == expected


def test_explicit_fields_are_respected():
    loud = annotate_question({"question": "Design a cache", "level": "HARD"}, 0, 6)
    assert loud.text == "Design a cache"
    assert loud.difficulty == "hard"
    assert loud.time_limit == 120

    timed = annotate_question({"text": "Explain hooks", "difficulty": "easy", "timeLimit": "45s"}, 3, 6)
    assert timed.difficulty == "easy"
    assert timed.time_limit == 45


def test_unusable_time_limit_uses_band_default():
    question = annotate_question({"text": "x", "difficulty": "medium", "timeLimit": 0}, 0, 6)
    assert question.time_limit == 60


def test_strings_and_empty_items():
    questions = annotate_questions(["What is a closure?", {}, None])
    assert questions[0].text == "What is a closure?"
    assert questions[1].text == "(question 2)"
    assert questions[2].text == "(question 3)"
    assert [question.id for question in questions] == ["q-0", "q-1", "q-2"]


def test_existing_id_is_kept():
    assert annotate_question({"id": "abc", "text": "x"}, 0, 1).id == "abc"


def test_ai_reply_in_fenced_block(fake_ai):
    reply = (
        "```json\n"
        '[{"text": "A", "difficulty": "easy"}, {"text": "B", "difficulty": "easy"},'
        ' {"text": "C", "difficulty": "medium"}, {"text": "D", "difficulty": "medium"},'
        ' {"text": "E", "difficulty": "hard", "timeLimit": 90}, {"text": "F", "difficulty": "hard"}]\n'
        "```"
    )
    prompts = fake_ai(reply)
    questions = generate_questions("backend", "Jane Doe resume")
    assert [question.text for question in questions] == ["A", "B", "C", "D", "E", "F"]
    assert questions[4].time_limit == 90
    assert len(prompts) == 1
    assert "backend" in prompts[0]
    assert "Jane Doe resume" in prompts[0]


def test_ai_reply_with_prose_around_array(fake_ai):
    fake_ai('Here you go: [{"text": "A"}, {"text": "B"}, {"text": "C"}] Good luck!')
    questions = generate_questions("frontend", "")
    assert [question.text for question in questions] == ["A", "B", "C"]
    assert _bands(questions) == ["easy", "medium", "hard"]


@pytest.mark.parametrize("reply", [UpstreamServiceError("timeout"), RuntimeError("boom"), "no json here", "[]"])
def test_ai_failure_falls_back(fake_ai, reply):
    fake_ai(reply)
    questions = generate_questions("fullstack", "resume")
    assert [question.text for question in questions] == [item["text"] for item in FALLBACK_QUESTIONS]


def test_blank_role_uses_default(fake_ai):
    prompts = fake_ai('[{"text": "A"}]')
    generate_questions("  ", "resume")
    assert '"fullstack"' in prompts[0]


def test_prompt_lists_band_split():
    prompt = build_prompt("data", "cv text", count=6)
    assert "2 easy, then 2 medium, then 2 hard" in prompt
    assert prompt.endswith("cv text")
