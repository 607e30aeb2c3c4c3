import asyncio
import json
import logging
from datetime import UTC, datetime
from typing import Optional

from redis.exceptions import RedisError

from ...errors import PersistenceError, SubscriptionError
from .gateway import ChangeCallback, ErrorCallback, document_path
from .models import END_TIME_FIELD, SessionRecord

logger = logging.getLogger(__name__)

STORE_ERRORS = (RedisError, OSError)


class RedisSessionStore:
    def __init__(self, redis_client, app_id: str, identity: str):
        """
        Initialize Redis-backed session store.

        Args:
            redis_client: Async Redis client (decode_responses=True)
            app_id: Application scope of the document path
            identity: Opaque per-user identity token

        The record lives in a hash keyed by the document path. Every write
        publishes a notice on ``<path>:changes`` so observers re-read it.
        """
        self.redis = redis_client
        self.app_id = app_id
        self.identity = identity
        self.key = document_path(app_id, identity)
        self.channel = f"{self.key}:changes"

    async def put(self, record: SessionRecord) -> None:
        """
        Replace the record atomically.

        Logic:
        1. DEL the hash so no stale field survives
        2. HSET the new fields
        3. PUBLISH a change notice
        All three run in one MULTI/EXEC transaction.
        """
        document = record.to_document()
        try:
            pipe = self.redis.pipeline(transaction=True)
            pipe.delete(self.key)
            if document:
                pipe.hset(self.key, mapping=document)
            pipe.publish(self.channel, self._notice("put", document))
            await pipe.execute()
        except STORE_ERRORS as e:
            raise PersistenceError(f"Failed to save session at {self.key}: {e}") from e

    async def clear_end_time(self) -> None:
        """Remove endTime only; the document itself persists."""
        try:
            pipe = self.redis.pipeline(transaction=True)
            pipe.hdel(self.key, END_TIME_FIELD)
            pipe.publish(self.channel, self._notice("clear", {END_TIME_FIELD: None}))
            await pipe.execute()
        except STORE_ERRORS as e:
            raise PersistenceError(f"Failed to clear session at {self.key}: {e}") from e

    async def fetch(self) -> Optional[SessionRecord]:
        try:
            document = await self.redis.hgetall(self.key)
        except STORE_ERRORS as e:
            raise PersistenceError(f"Failed to read session at {self.key}: {e}") from e
        return SessionRecord.from_document(document)

    async def subscribe(self, on_change: ChangeCallback, on_error: ErrorCallback) -> "RedisSubscription":
        subscription = RedisSubscription(self, on_change, on_error)
        await subscription.start()
        return subscription

    def _notice(self, op: str, data: dict) -> str:
        return json.dumps(
            {"op": op, "path": self.key, "timestamp": datetime.now(UTC).isoformat(), "data": data}
        )


class RedisSubscription:
    """Pub/sub listener delivering snapshots of one session document."""

    def __init__(self, store: RedisSessionStore, on_change: ChangeCallback, on_error: ErrorCallback):
        self.store = store
        self.on_change = on_change
        self.on_error = on_error
        self._pubsub = None
        self._task: Optional[asyncio.Task] = None
        self._failed = False
        self._closed = False

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done() and not self._closed

    async def start(self) -> None:
        """
        Attach the listener.

        Subscribes before the initial read so no change between the two is
        lost; a duplicate snapshot is harmless.
        """
        self._pubsub = self.store.redis.pubsub()
        try:
            await self._pubsub.subscribe(self.store.channel)
            record = await self.store.fetch()
        except (PersistenceError, *STORE_ERRORS) as e:
            await self._close_pubsub()
            raise SubscriptionError(f"Failed to attach listener to {self.store.key}: {e}") from e

        logger.info(f"Subscribed to channel: {self.store.channel}")
        self.on_change(record)
        self._task = asyncio.get_running_loop().create_task(
            self._listen(), name=f"subscription:{self.store.identity}"
        )

    async def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._close_pubsub()

    async def _listen(self) -> None:
        try:
            async for message in self._pubsub.listen():
                if message.get("type") != "message":
                    continue
                record = await self.store.fetch()
                self.on_change(record)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Listener for {self.store.key} failed: {e}", exc_info=True)
            self._fail(SubscriptionError(f"Session listener failed: {e}"))
        else:
            self._fail(SubscriptionError("Session listener closed by the store"))
        finally:
            if not self._closed:
                await self._close_pubsub()

    def _fail(self, error: SubscriptionError) -> None:
        if self._failed or self._closed:
            return
        self._failed = True
        self.on_error(error)

    async def _close_pubsub(self) -> None:
        pubsub, self._pubsub = self._pubsub, None
        if pubsub is None:
            return
        try:
            await pubsub.unsubscribe(self.store.channel)
            await pubsub.aclose()
        except STORE_ERRORS as e:
            logger.warning(f"Failed to close listener for {self.store.key}: {e}")
