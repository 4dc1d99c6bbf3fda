"""SQLite persistence helpers."""
from .migrate import migrate
from .sqlite import get_conn

__all__ = ["get_conn", "migrate"]
