"""
API Module - Black Box Interface

Purpose: Presentation adapter between the session manager and clients
Interface: BroadcastPresenter, resolve_navigation(), REST/SSE models
Hidden: Listener queues, log buffering, status text

The API module only renders and forwards - lifecycle logic stays in the
session module.
"""

from .models import (
    CommandResponse,
    LogEntry,
    NavigateRequest,
    NavigateResponse,
    SessionStatusResponse,
)
from .navigation import resolve_navigation
from .presenter import BroadcastPresenter, format_time

__all__ = [
    "BroadcastPresenter",
    "CommandResponse",
    "LogEntry",
    "NavigateRequest",
    "NavigateResponse",
    "SessionStatusResponse",
    "format_time",
    "resolve_navigation",
]
