"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    GEMINI_API_KEY: str = ""
    GOOGLE_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com"
    AI_TIMEOUT_S: float = Field(default=20.0, gt=0)

    SESSION_BACKEND: str = "json"
    SESSIONS_PATH: str = Field(default="data/sessions.json")
    DB_PATH: str = Field(default="data/sessions.db")

    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    QUESTION_COUNT: int = 6
    DEFAULT_ROLE: str = "fullstack"
    MAX_QUESTION_SECONDS: int = 120

    PUBLIC_DIR: str = "public"
    SNAPSHOT_PATH: str = "data/current_session.json"

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")

    @property
    def ai_api_key(self) -> str:
        return (self.GEMINI_API_KEY or self.GOOGLE_API_KEY).strip()

    @property
    def ai_enabled(self) -> bool:
        return bool(self.ai_api_key)

    @property
    def ai_model(self) -> str:
        model = self.GEMINI_MODEL.strip()
        return model[len("models/"):] if model.startswith("models/") else model


settings = Settings()
