"""
Session record as stored remotely.

Wire field names follow the document layout shared with every other client
of the same store: ``endTime`` and ``startedAt``, both in milliseconds since
the epoch.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

END_TIME_FIELD = "endTime"
STARTED_AT_FIELD = "startedAt"


def _as_ms(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(float(value))


@dataclass(frozen=True)
class SessionRecord:
    """One identity's session document."""

    end_time: Optional[int] = None
    started_at: Optional[int] = None

    @property
    def active(self) -> bool:
        """A session was requested; it may still be stale."""
        return self.end_time is not None

    def to_document(self) -> Dict[str, int]:
        document = {}
        if self.end_time is not None:
            document[END_TIME_FIELD] = self.end_time
        if self.started_at is not None:
            document[STARTED_AT_FIELD] = self.started_at
        return document

    @classmethod
    def from_document(cls, document: Optional[Mapping[str, Any]]) -> Optional["SessionRecord"]:
        """
        Build a record from a stored document.

        Returns:
            None when the document does not exist
        """
        if not document:
            return None
        return cls(
            end_time=_as_ms(document.get(END_TIME_FIELD)),
            started_at=_as_ms(document.get(STARTED_AT_FIELD)),
        )
