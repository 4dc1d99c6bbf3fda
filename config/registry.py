"""In-memory model registry for AI-backed components."""
from typing import Any, Callable, Dict, Optional

_REGISTRY: Dict[str, Callable[..., Any]] = {}


def bind_model(key: str, fn: Callable[..., Any]) -> None:
    """Bind a callable implementation to a registry key."""
    _REGISTRY[key] = fn


def unbind_model(key: str) -> None:
    _REGISTRY.pop(key, None)


def get_model(key: str) -> Callable[..., Any]:
    """Retrieve a callable from the registry.

    Raises:
        KeyError: If no callable has been bound for ``key``.
    """

    if key not in _REGISTRY:
        raise KeyError(f"Model not bound in registry: {key}")
    return _REGISTRY[key]


def resolve_model(key: str, default: Optional[Callable[..., Any]] = None) -> Callable[..., Any]:
    """Return the bound callable for ``key`` or ``default`` when nothing is bound."""

    fn = _REGISTRY.get(key, default)
    if fn is None:
        raise KeyError(f"Model not bound in registry: {key}")
    return fn


TEXT_SERVICE_KEY = "models.text_service"
