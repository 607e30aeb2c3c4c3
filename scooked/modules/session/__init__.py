"""
Session Module - Black Box Interface

Purpose: Manage the timed session lifecycle
Interface: start(), stop(), tick(), reconcile(), attach(), close()
Hidden: Tick loop handle, countdown derivation, retried remote writes

The remote record is authoritative for every observer; the local countdown is
authoritative for this client's own session when the store is unreachable.
"""

from .manager import SessionManager
from .models import (
    DEFAULT_SESSION_DURATION_MS,
    LocalTimerState,
    LogSeverity,
    NullPresenter,
    Presenter,
    SessionState,
    StateChangeReason,
    remaining_seconds,
)

__all__ = [
    "SessionManager",
    "SessionState",
    "StateChangeReason",
    "LogSeverity",
    "LocalTimerState",
    "Presenter",
    "NullPresenter",
    "DEFAULT_SESSION_DURATION_MS",
    "remaining_seconds",
]
