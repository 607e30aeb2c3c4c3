"""
Scooked API data models.

These models define the structure of everything the presentation adapter
sends to and receives from clients.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..session import LogSeverity, SessionState, StateChangeReason


class LogEntry(BaseModel):
    """One operator-visible log line."""

    time: str = Field(..., description="Local wall-clock time, HH:MM:SS")
    message: str
    severity: LogSeverity


class SessionStatusResponse(BaseModel):
    """Current session status as rendered to clients."""

    state: SessionState
    reason: Optional[StateChangeReason] = None
    remaining_seconds: int = Field(0, ge=0)
    display: str = Field("00:00", description="Remaining time as MM:SS")
    status_text: str
    end_time_ms: Optional[int] = None
    online: bool = Field(False, description="Whether the remote store is attached")
    identity: Optional[str] = None
    log: List[LogEntry] = Field(default_factory=list)


class CommandResponse(BaseModel):
    """Result of a user intent."""

    accepted: bool = Field(..., description="False when the intent was a no-op")
    state: SessionState
    end_time_ms: Optional[int] = None


class NavigateRequest(BaseModel):
    """Address bar input."""

    query: str = Field(..., max_length=2048)


class NavigateResponse(BaseModel):
    """Where the client should go."""

    url: str
