"""Shared async Redis client."""

from typing import Optional

import redis.asyncio as redis

from dealerhub.core.config import settings
from dealerhub.core.logging import logger


class RedisClient:
    """Lazily-connected Redis client shared by the caching and session services."""

    def __init__(self):
        """Initialize without connecting; the pool is created on first use."""
        self._client: Optional[redis.Redis] = None

    @property
    def client(self) -> redis.Redis:
        """Return the underlying client, creating the connection pool if needed."""
        if self._client is None:
            self._client = redis.Redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                password=settings.REDIS_PASSWORD,
                db=settings.REDIS_DB,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
        return self._client

    async def ping(self) -> bool:
        """Check connectivity."""
        try:
            return bool(await self.client.ping())
        except Exception as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        """Close the connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


redis_client = RedisClient()
