import asyncio
import json
import logging
from collections import deque
from datetime import datetime
from typing import Any, Deque, Dict, Optional, Set

from ..session import LogSeverity, SessionState, StateChangeReason
from .models import LogEntry, SessionStatusResponse

logger = logging.getLogger(__name__)

MAX_LOG_ENTRIES = 20

STATUS_CONNECTED = "STATUS: CONNECTION ESTABLISHED"
STATUS_DISCONNECTED = "STATUS: DISCONNECTED"
STATUS_EXPIRED = "STATUS: SESSION EXPIRED. ACCESS NORMALIZED."


def format_time(total_seconds: float) -> str:
    """Render seconds as MM:SS."""
    total_seconds = max(0, int(total_seconds))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


class BroadcastPresenter:
    """
    Presenter fanning manager output out to any number of stream listeners.

    Keeps the latest status and a bounded log so late joiners get the
    current picture. Each listener owns a bounded queue; when a listener
    falls behind its oldest events are dropped rather than blocking the
    manager.
    """

    def __init__(self, max_log_entries: int = MAX_LOG_ENTRIES, queue_size: int = 100):
        self.state = SessionState.DISCONNECTED
        self.reason: Optional[StateChangeReason] = None
        self.remaining_seconds = 0
        self.identity: Optional[str] = None
        self.online = False
        self.log: Deque[LogEntry] = deque(maxlen=max_log_entries)
        self.queue_size = queue_size
        self._listeners: Set[asyncio.Queue] = set()

    @property
    def status_text(self) -> str:
        if self.state is SessionState.CONNECTED:
            return STATUS_CONNECTED
        if self.reason is StateChangeReason.EXPIRED:
            return STATUS_EXPIRED
        return STATUS_DISCONNECTED

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # Presenter protocol

    def on_tick(self, remaining_seconds: int) -> None:
        self.remaining_seconds = remaining_seconds
        self._broadcast(
            "tick",
            {"remaining_seconds": remaining_seconds, "display": format_time(remaining_seconds)},
        )

    def on_state_change(self, state: SessionState, reason: Optional[StateChangeReason] = None) -> None:
        self.state = state
        self.reason = reason
        if state is not SessionState.CONNECTED:
            self.remaining_seconds = 0
        self._broadcast(
            "state",
            {
                "state": state.value,
                "reason": reason.value if reason else None,
                "status_text": self.status_text,
            },
        )

    def on_log(self, message: str, severity: LogSeverity) -> None:
        entry = LogEntry(time=datetime.now().strftime("%H:%M:%S"), message=message, severity=severity)
        self.log.append(entry)
        self._broadcast("log", entry.model_dump(mode="json"))

    # Stream listeners

    def status(self) -> Dict[str, Any]:
        """Current status, shaped like SessionStatusResponse."""
        return {
            "state": self.state,
            "reason": self.reason,
            "remaining_seconds": self.remaining_seconds,
            "display": format_time(self.remaining_seconds),
            "status_text": self.status_text,
            "online": self.online,
            "identity": self.identity,
            "log": list(self.log),
        }

    def listen(self) -> asyncio.Queue:
        """Register a listener; its queue starts with a status event."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        status = SessionStatusResponse(**self.status()).model_dump(mode="json")
        queue.put_nowait({"event": "status", "data": json.dumps(status)})
        self._listeners.add(queue)
        return queue

    def unlisten(self, queue: asyncio.Queue) -> None:
        self._listeners.discard(queue)

    def _broadcast(self, event: str, data: Dict[str, Any]) -> None:
        message = {"event": event, "data": json.dumps(data)}
        for queue in list(self._listeners):
            if queue.full():
                queue.get_nowait()
                logger.debug(f"Listener queue full, dropped oldest event before {event}")
            queue.put_nowait(message)
