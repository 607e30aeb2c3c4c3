"""
Session lifecycle types shared between the manager and its presenters.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

DEFAULT_SESSION_DURATION_MS = 10 * 60 * 1000
ONE_MINUTE_SECONDS = 60


class SessionState(str, Enum):
    """Lifecycle state of the local session."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    EXPIRING = "expiring"


class StateChangeReason(str, Enum):
    """Why the session changed state."""

    EXPIRED = "expired"
    USER_STOPPED = "user-stopped"
    REMOTE_SYNC = "remote-sync"


class LogSeverity(str, Enum):
    """Severity of an operator-visible log line."""

    INFO = "info"
    NOTICE = "notice"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    @property
    def level(self) -> int:
        """Matching logging level."""
        return {
            LogSeverity.WARNING: logging.WARNING,
            LogSeverity.ERROR: logging.ERROR,
        }.get(self, logging.INFO)


@dataclass
class LocalTimerState:
    """In-memory mirror of the countdown; lost on restart."""

    end_time_ms: Optional[int] = None
    running: bool = False


class Presenter(Protocol):
    """Protocol for anything that renders manager state."""

    def on_tick(self, remaining_seconds: int) -> None:
        ...

    def on_state_change(self, state: SessionState, reason: Optional[StateChangeReason] = None) -> None:
        ...

    def on_log(self, message: str, severity: LogSeverity) -> None:
        ...


class NullPresenter:
    """Presenter that renders nothing."""

    def on_tick(self, remaining_seconds: int) -> None:
        pass

    def on_state_change(self, state: SessionState, reason: Optional[StateChangeReason] = None) -> None:
        pass

    def on_log(self, message: str, severity: LogSeverity) -> None:
        pass


def remaining_seconds(end_time_ms: int, now_ms: int) -> int:
    """Whole seconds left before end_time_ms, never negative."""
    return max(0, (end_time_ms - now_ms) // 1000)
