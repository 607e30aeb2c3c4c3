"""Store gateway interfaces following Black Box Design principles."""
from typing import Callable, Optional, Protocol

from ...errors import SubscriptionError
from .models import SessionRecord

SESSION_COLLECTION = "scooked_session"
SESSION_DOCUMENT = "active_session"

ChangeCallback = Callable[[Optional[SessionRecord]], None]
ErrorCallback = Callable[[SubscriptionError], None]


def document_path(app_id: str, identity: str) -> str:
    """
    Build the identity-scoped path of the session document.

    Example:
        >>> document_path("scooked-default-app", "u1")
        'artifacts/scooked-default-app/users/u1/scooked_session/active_session'
    """
    if not app_id or not identity:
        raise ValueError("app_id and identity are required to build a document path")
    return f"artifacts/{app_id}/users/{identity}/{SESSION_COLLECTION}/{SESSION_DOCUMENT}"


class Subscription(Protocol):
    """Handle for a live change listener."""

    @property
    def active(self) -> bool:
        """Whether change notifications are still being delivered."""
        ...

    async def unsubscribe(self) -> None:
        """Stop delivering changes. Idempotent."""
        ...


class SessionStoreGateway(Protocol):
    """Protocol for session record stores."""

    async def put(self, record: SessionRecord) -> None:
        """
        Durably replace the whole record.

        Raises:
            PersistenceError: On network or auth failure
        """
        ...

    async def clear_end_time(self) -> None:
        """
        Durably remove endTime, keeping the document.

        Raises:
            PersistenceError: On network or auth failure
        """
        ...

    async def fetch(self) -> Optional[SessionRecord]:
        """
        Read the current record, None if the document does not exist.

        Raises:
            PersistenceError: On network or auth failure
        """
        ...

    async def subscribe(self, on_change: ChangeCallback, on_error: ErrorCallback) -> Subscription:
        """
        Register a change listener.

        on_change receives the current record right away and again after every
        change, with None for an absent document. on_error fires at most once,
        after which the subscription is dead; nothing resubscribes.

        Raises:
            SubscriptionError: If the listener cannot be attached
        """
        ...
