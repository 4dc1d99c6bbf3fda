from __future__ import annotations  # Session repository with JSON-file and SQLite backends

import json
import os
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol
from uuid import uuid4

from pydantic import ValidationError

from config.settings import Settings
from storage import get_conn, migrate

from .models import Session


class PersistenceError(RuntimeError):  # Backing store could not be read or written
    pass


class SessionRepository(Protocol):  # Storage contract used by the HTTP handlers
    def upsert(self, session: Session) -> Session: ...

    def list_sessions(self) -> List[Session]: ...

    def get_session(self, session_id: str) -> Optional[Session]: ...

    def delete_session(self, session_id: str) -> int: ...


def now_ms() -> int:
    return int(time.time() * 1000)


def stamp(session: Session) -> Session:  # Assign id and creation time when absent
    updates: Dict[str, Any] = {}
    if not session.id:
        updates["id"] = uuid4().hex
    if session.created_at is None:
        updates["created_at"] = now_ms()
    return session.model_copy(update=updates) if updates else session


def newest_first(sessions: List[Session]) -> List[Session]:
    return sorted(sessions, key=lambda item: item.created_at or 0, reverse=True)


class JsonFileSessionStore:  # Whole collection kept as one JSON array on disk
    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> List[Session]:
        if not self._path.exists():
            return []
        try:
            text = self._path.read_text(encoding="utf-8")
            records = json.loads(text or "[]")
            if not isinstance(records, list):
                raise PersistenceError(f"Session file {self._path} does not hold a list")
            return [Session.model_validate(record) for record in records]
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise PersistenceError(f"Unable to read sessions from {self._path}") from exc

    def _save(self, sessions: List[Session]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as handle:
                json.dump([item.to_wire() for item in sessions], handle, ensure_ascii=False, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write sessions to {self._path}") from exc

    def upsert(self, session: Session) -> Session:
        entry = stamp(session)
        with self._lock:
            sessions = self._load()
            for index, existing in enumerate(sessions):
                if existing.id == entry.id:
                    sessions[index] = entry
                    break
            else:
                sessions.append(entry)
            self._save(sessions)
        return entry

    def list_sessions(self) -> List[Session]:
        with self._lock:
            return newest_first(self._load())

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            sessions = self._load()
        return next((item for item in sessions if item.id == session_id), None)

    def delete_session(self, session_id: str) -> int:
        with self._lock:
            sessions = self._load()
            kept = [item for item in sessions if item.id != session_id]
            removed = len(sessions) - len(kept)
            if removed:
                self._save(kept)
        return removed


class SqliteSessionStore:  # One row per session, payload stored as JSON
    def __init__(self, path: Path) -> None:
        self._path = str(path)
        try:
            migrate(self._path)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to prepare session database {self._path}") from exc

    def _row_to_session(self, row: sqlite3.Row) -> Session:
        try:
            return Session.model_validate_json(row["payload"])
        except ValidationError as exc:
            raise PersistenceError(f"Corrupt session row {row['id']}") from exc

    def upsert(self, session: Session) -> Session:
        entry = stamp(session)
        try:
            with get_conn(self._path) as conn:
                conn.execute(
                    """
                    INSERT INTO interview_sessions (id, created_at, payload)
                    VALUES (?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET created_at = excluded.created_at, payload = excluded.payload
                    """,
                    (entry.id, entry.created_at, json.dumps(entry.to_wire(), ensure_ascii=False)),
                )
        except sqlite3.Error as exc:
            raise PersistenceError("Unable to save session") from exc
        return entry

    def list_sessions(self) -> List[Session]:
        try:
            with get_conn(self._path) as conn:
                rows = conn.execute(
                    "SELECT id, payload FROM interview_sessions ORDER BY created_at DESC, rowid DESC"
                ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError("Unable to list sessions") from exc
        return [self._row_to_session(row) for row in rows]

    def get_session(self, session_id: str) -> Optional[Session]:
        try:
            with get_conn(self._path) as conn:
                row = conn.execute(
                    "SELECT id, payload FROM interview_sessions WHERE id = ?",
                    (session_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError("Unable to load session") from exc
        return self._row_to_session(row) if row is not None else None

    def delete_session(self, session_id: str) -> int:
        try:
            with get_conn(self._path) as conn:
                cursor = conn.execute("DELETE FROM interview_sessions WHERE id = ?", (session_id,))
                return cursor.rowcount
        except sqlite3.Error as exc:
            raise PersistenceError("Unable to delete session") from exc


_STORES: Dict[str, SessionRepository] = {}
_STORES_GUARD = threading.Lock()


def build_session_store(cfg: Settings) -> SessionRepository:  # Select backend from settings, one instance per path
    backend = cfg.SESSION_BACKEND.strip().lower()
    if backend == "sqlite":
        key = f"sqlite:{cfg.DB_PATH}"
    elif backend == "json":
        key = f"json:{cfg.SESSIONS_PATH}"
    else:
        raise ValueError(f"Unknown session backend '{cfg.SESSION_BACKEND}'")
    with _STORES_GUARD:
        store = _STORES.get(key)
        if store is None:
            store = SqliteSessionStore(Path(cfg.DB_PATH)) if backend == "sqlite" else JsonFileSessionStore(Path(cfg.SESSIONS_PATH))
            _STORES[key] = store
    return store


__all__ = [
    "JsonFileSessionStore",
    "PersistenceError",
    "SessionRepository",
    "SqliteSessionStore",
    "build_session_store",
    "newest_first",
    "now_ms",
    "stamp",
]
