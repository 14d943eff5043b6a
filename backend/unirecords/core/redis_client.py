import redis.asyncio as aioredis
from redis.asyncio import Redis
from typing import Optional
import json

from unirecords.core.config import settings
from unirecords.core.logging_config import logger


class RedisClient:
    """
    Optional Redis cache.

    When REDIS_URL is empty or the server cannot be reached at startup the
    client stays disabled: reads miss, writes are dropped, nothing raises.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url if url is not None else settings.REDIS_URL
        self.redis: Optional[Redis] = None

    @property
    def enabled(self) -> bool:
        return self.redis is not None

    async def connect(self) -> bool:
        """Connect to Redis, degrading to a disabled cache on failure"""
        if not self.url:
            logger.info("Redis not configured - cache disabled")
            return False
        client = aioredis.from_url(
            self.url,
            encoding="utf-8",
            decode_responses=True
        )
        try:
            await client.ping()
        except Exception as e:
            logger.warning(f"Redis unavailable ({e}) - cache disabled")
            await client.close()
            return False
        self.redis = client
        logger.info("Redis connected successfully")
        return True

    async def disconnect(self):
        """Disconnect from Redis"""
        if self.redis:
            await self.redis.close()
            self.redis = None
            logger.info("Redis disconnected")

    async def ping(self) -> bool:
        if not self.redis:
            return False
        return bool(await self.redis.ping())

    async def cache_get(self, key: str) -> Optional[dict]:
        """Get cached value"""
        if not self.redis:
            return None
        try:
            value = await self.redis.get(key)
            return json.loads(value) if value else None
        except Exception as e:
            logger.error(f"Cache GET error: {e}")
            return None

    async def cache_set(
        self,
        key: str,
        value: dict,
        expire: Optional[int] = None
    ) -> bool:
        """Set cached value"""
        if not self.redis:
            return False
        try:
            return await self.redis.setex(
                key,
                expire or settings.CACHE_TTL_SECONDS,
                json.dumps(value, default=str)
            )
        except Exception as e:
            logger.error(f"Cache SET error: {e}")
            return False

    async def cache_delete(self, key: str) -> bool:
        """Delete cached value"""
        if not self.redis:
            return False
        try:
            return await self.redis.delete(key) > 0
        except Exception as e:
            logger.error(f"Cache DELETE error: {e}")
            return False


redis_client = RedisClient()
