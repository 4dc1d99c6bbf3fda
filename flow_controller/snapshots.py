"""Local snapshot persistence for resuming an unfinished interview."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .models import FlowSnapshot


logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self, snapshot: FlowSnapshot) -> None:
        """Persist the snapshot atomically."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(snapshot.model_dump(mode="json", by_alias=True, exclude_none=True), handle, ensure_ascii=False)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, self._path)

    def load(self) -> Optional[FlowSnapshot]:
        """Load the snapshot; unreadable or completed snapshots are discarded."""
        if not self._path.exists():
            return None
        try:
            with open(self._path, "r", encoding="utf-8") as handle:
                snapshot = FlowSnapshot.model_validate(json.load(handle))
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Invalid saved session at %s: %s", self._path, exc)
            self.clear()
            return None
        if not snapshot.resumable:
            self.clear()
            return None
        return snapshot

    def has_resumable(self) -> bool:
        return self.load() is not None

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


__all__ = ["SnapshotStore"]
