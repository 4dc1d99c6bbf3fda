"""Configuration package for the interview assistant services."""
from .registry import TEXT_SERVICE_KEY, bind_model, get_model, resolve_model, unbind_model
from .routes import LlmRoute, text_route
from .settings import Settings, settings

__all__ = [
    "LlmRoute",
    "text_route",
    "TEXT_SERVICE_KEY",
    "bind_model",
    "get_model",
    "resolve_model",
    "unbind_model",
    "Settings",
    "settings",
]
