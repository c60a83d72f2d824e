"""
Redis cache client with JSON serialization.

The cache is an optimisation for public event reads. Every failure degrades
to a miss and is logged; nothing here may fail a request.
"""
import json
from typing import Optional, Any
from redis import asyncio as aioredis
from redis.exceptions import RedisError
from app.core.config import settings
from app.core.logging import logger


class RedisCache:
    """Lazily connected Redis cache."""

    def __init__(self, url: str, enabled: bool = True):
        self.url = url
        self.enabled = enabled
        self._client: Optional[aioredis.Redis] = None

    def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(
                self.url,
                decode_responses=True,
                max_connections=20,
                socket_connect_timeout=1,
                socket_timeout=1,
            )
            logger.info("Redis connection pool created")
        return self._client

    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache by key.

        Returns:
            Cached value or None if not found, disabled or unreachable
        """
        if not self.enabled:
            return None
        try:
            value = await self._get_client().get(key)
            if value:
                return json.loads(value)
            return None
        except (RedisError, OSError, ValueError) as e:
            logger.error(f"Redis GET error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any, expire: int = 300) -> bool:
        if not self.enabled:
            return False
        try:
            await self._get_client().setex(key, expire, json.dumps(value, default=str))
            return True
        except (RedisError, OSError, TypeError) as e:
            logger.error(f"Redis SET error for key {key}: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching pattern.

        Args:
            pattern: Key pattern (e.g., 'events:list:*')

        Returns:
            Number of keys deleted
        """
        if not self.enabled:
            return 0
        try:
            client = self._get_client()
            keys = [key async for key in client.scan_iter(match=pattern)]
            if keys:
                return await client.delete(*keys)
            return 0
        except (RedisError, OSError) as e:
            logger.error(f"Redis DELETE_PATTERN error for pattern {pattern}: {e}")
            return 0

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection pool closed")


# Create a single instance to be imported throughout the app
cache = RedisCache(settings.REDIS_URL, enabled=settings.CACHE_ENABLED)
