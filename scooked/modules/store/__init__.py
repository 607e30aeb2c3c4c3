"""
Store Module - Black Box Interface

Purpose: Persist, clear and observe the single session record of an identity
Interface: put(), clear_end_time(), fetch(), subscribe()
Hidden: Document path layout, Redis hash encoding, pub/sub fan-out

Replaceable with any document store offering change notifications.
"""

from .gateway import SessionStoreGateway, Subscription, document_path
from .models import SessionRecord
from .redis_store import RedisSessionStore, RedisSubscription

__all__ = [
    "SessionRecord",
    "SessionStoreGateway",
    "Subscription",
    "RedisSessionStore",
    "RedisSubscription",
    "document_path",
]
