"""
Storage Module - Black Box Interface

Purpose: Own the connection to the remote document store
Interface: connect(), disconnect()
Hidden: Redis specifics, connection pooling

Can be replaced with any storage backend without affecting other modules.
"""

import logging
from typing import Optional

import redis.asyncio as redis

from ...config.provider import StoreConfig

logger = logging.getLogger(__name__)


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, config: StoreConfig):
        """Initialize storage from the store configuration."""
        if not config.is_configured:
            raise ValueError("Remote store is not configured")
        self.url = config.url
        self.password = config.password
        self._client: Optional[redis.Redis] = None

    async def connect(self) -> redis.Redis:
        """Get storage connection, verifying it with a PING."""
        if not self._client:
            client = redis.from_url(
                self.url,
                password=self.password,
                encoding="utf-8",
                decode_responses=True,
            )
            try:
                await client.ping()
            except Exception:
                await client.aclose()
                raise
            self._client = client
            logger.info("Connected to remote store")
        return self._client

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


__all__ = ["StorageModule"]
