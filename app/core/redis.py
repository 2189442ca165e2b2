"""
Redis connection and caching utilities.
"""
import json
from typing import Optional, Any
import structlog
from redis import asyncio as aioredis
from redis.exceptions import RedisError
from app.core.config import settings

logger = structlog.get_logger(__name__)


class RedisClient:
    """Async Redis client wrapper with caching utilities."""

    def __init__(self):
        self.redis: Optional[aioredis.Redis] = None

    async def connect(self):
        """Establish Redis connection."""
        if not settings.REDIS_ENABLED:
            return
        self.redis = aioredis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            max_connections=10,
        )

    async def disconnect(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache. Connection errors count as a miss."""
        if not self.redis:
            return None
        try:
            value = await self.redis.get(key)
        except RedisError as e:
            logger.warning("cache_get_failed", key=key, error=str(e))
            return None
        if value:
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        return None

    async def set(
        self,
        key: str,
        value: Any,
        expire: Optional[int] = None
    ) -> bool:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: Value to cache
            expire: Expiration time in seconds

        Returns:
            True if the value was stored
        """
        if not self.redis:
            return False

        if not isinstance(value, str):
            value = json.dumps(value)

        try:
            await self.redis.set(key, value, ex=expire)
        except RedisError as e:
            logger.warning("cache_set_failed", key=key, error=str(e))
            return False
        return True


# Global Redis client instance
redis_client = RedisClient()


async def get_redis() -> RedisClient:
    """Dependency for getting Redis client."""
    return redis_client
