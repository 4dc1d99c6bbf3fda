import pytest

from config.registry import TEXT_SERVICE_KEY, bind_model, get_model, resolve_model, unbind_model
from config.settings import Settings


def test_settings_defaults():
    cfg = Settings(_env_file=None, GEMINI_API_KEY="", GOOGLE_API_KEY="")
    assert cfg.SESSIONS_PATH.endswith(".json")
    assert cfg.DB_PATH.endswith(".db")
    assert cfg.MAX_UPLOAD_BYTES == 5 * 1024 * 1024
    assert cfg.AI_TIMEOUT_S == 20
    assert not cfg.ai_enabled


def test_google_key_is_accepted():
    cfg = Settings(_env_file=None, GEMINI_API_KEY="", GOOGLE_API_KEY=" g-key ")
    assert cfg.ai_api_key == "g-key"
    assert cfg.ai_enabled


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "models/gemini-pro")
    monkeypatch.setenv("SESSION_BACKEND", "sqlite")
    cfg = Settings(_env_file=None)
    assert cfg.ai_model == "gemini-pro"
    assert cfg.SESSION_BACKEND == "sqlite"


def test_registry_bind_and_retrieve():
    marker = object()
    bind_model(TEXT_SERVICE_KEY, lambda prompt: marker)
    assert get_model(TEXT_SERVICE_KEY)("hi") is marker
    unbind_model(TEXT_SERVICE_KEY)
    with pytest.raises(KeyError):
        get_model(TEXT_SERVICE_KEY)


def test_resolve_model_default():
    fallback = lambda prompt: "fallback"  # noqa: E731
    assert resolve_model(TEXT_SERVICE_KEY, default=fallback) is fallback
    with pytest.raises(KeyError):
        resolve_model(TEXT_SERVICE_KEY)
