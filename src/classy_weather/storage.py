"""Persistence of the last search query."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import redis.asyncio as redis

from classy_weather.config import CACHE_PREFIX, QUERY_STORAGE_KEY, REDIS_URL

logger = logging.getLogger(__name__)


class QueryStore(ABC):
    """Key-value store holding the last query under a fixed key."""

    @abstractmethod
    async def get(self) -> Optional[str]:
        """Stored query, or None if nothing was stored."""

    @abstractmethod
    async def set(self, value: str) -> None:
        """Replace the stored query."""

    async def aclose(self):
        pass


class MemoryQueryStore(QueryStore):
    """In-process store, used when Redis is not wanted."""

    def __init__(self, value: Optional[str] = None):
        self.value = value

    async def get(self) -> Optional[str]:
        return self.value

    async def set(self, value: str) -> None:
        self.value = value


class RedisQueryStore(QueryStore):
    """Store backed by a Redis string key."""

    def __init__(self, redis_client: Optional[redis.Redis] = None, key: str = QUERY_STORAGE_KEY):
        """Initialize the store.

        Args:
            redis_client: Optional Redis client. If None, creates new client.
            key: Key the query is stored under, prefixed with the cache prefix
        """
        self.redis_client = redis_client or redis.from_url(REDIS_URL)
        self.key = f"{CACHE_PREFIX}:{key}"

    async def get(self) -> Optional[str]:
        value = await self.redis_client.get(self.key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, value: str) -> None:
        logger.debug(f"Storing query under {self.key}")
        await self.redis_client.set(self.key, value)

    async def aclose(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
