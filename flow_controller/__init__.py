from __future__ import annotations  # Re-export flow_controller public API

from .backend import BackendError, HttpInterviewBackend, InterviewBackend, LocalInterviewBackend
from .controller import InterviewFlow
from .countdown import Countdown
from .models import FlowError, FlowSnapshot, FlowStage, MissingContactError
from .snapshots import SnapshotStore

__all__ = [
    "BackendError",
    "Countdown",
    "FlowError",
    "FlowSnapshot",
    "FlowStage",
    "HttpInterviewBackend",
    "InterviewBackend",
    "InterviewFlow",
    "LocalInterviewBackend",
    "MissingContactError",
    "SnapshotStore",
]
