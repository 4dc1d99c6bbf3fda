"""AI text service route configuration."""
from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field

from .settings import Settings


class LlmRoute(BaseModel):
    """Text-completion endpoint configuration."""

    name: str
    base_url: str
    model: str
    timeout_s: float = Field(ge=0.1)
    api_key: str = Field(default="", repr=False)
    extra_headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def endpoint(self) -> str:
        return f"/v1beta/models/{self.model}:generateContent"

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.endpoint}"


def text_route(cfg: Settings) -> LlmRoute:
    """Build the route used for question generation and answer evaluation."""

    return LlmRoute(
        name="gemini",
        base_url=cfg.GEMINI_BASE_URL,
        model=cfg.ai_model,
        timeout_s=cfg.AI_TIMEOUT_S,
        api_key=cfg.ai_api_key,
    )
