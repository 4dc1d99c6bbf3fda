import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ["ENABLE_FILE_LOGS"] = "0"

from config.registry import TEXT_SERVICE_KEY, bind_model, unbind_model
from config.settings import settings
from session_store import Question, Session


@pytest.fixture(autouse=True)
def tmp_store(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "SESSION_BACKEND", "json", raising=False)
    monkeypatch.setattr(settings, "SESSIONS_PATH", str(tmp_path / "sessions.json"), raising=False)
    monkeypatch.setattr(settings, "DB_PATH", str(tmp_path / "sessions.db"), raising=False)
    monkeypatch.setattr(settings, "SNAPSHOT_PATH", str(tmp_path / "current_session.json"), raising=False)
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "", raising=False)
    monkeypatch.setattr(settings, "GOOGLE_API_KEY", "", raising=False)
    try:
        yield tmp_path
    finally:
        unbind_model(TEXT_SERVICE_KEY)


@pytest.fixture
def fake_ai(monkeypatch):
    """Enable the AI path and bind a canned text service; returns the recorded prompts."""

    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key", raising=False)
    prompts = []

    def bind(reply):
        def service(prompt):
            prompts.append(prompt)
            if isinstance(reply, Exception):
                raise reply
            return reply

        bind_model(TEXT_SERVICE_KEY, service)
        return prompts

    return bind


@pytest.fixture
def medium_session():
    return Session(
        questions=[
            Question(text="Explain closures.", difficulty="medium"),
            Question(text="Explain the event loop.", difficulty="medium"),
            Question(text="Explain hoisting.", difficulty="medium"),
        ],
        answers={
            0: {"text": "", "submittedAt": 1},
            1: {"text": "a short one", "submittedAt": 2},
            2: {
                "text": "a much longer and more detailed answer exceeding eighty characters in total length for this test case",
                "submittedAt": 3,
            },
        },
    )
