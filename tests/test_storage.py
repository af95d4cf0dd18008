from unittest.mock import AsyncMock

import pytest

from classy_weather.storage import MemoryQueryStore, QueryStore, RedisQueryStore


class TestQueryStores:
    """Test cases for the last-query stores."""

    @pytest.mark.asyncio
    async def test_memory_store(self):
        store = MemoryQueryStore()
        assert await store.get() is None

        await store.set("Berlin")
        assert await store.get() == "Berlin"

    @pytest.mark.asyncio
    async def test_redis_store_uses_prefixed_key(self):
        redis_client = AsyncMock()
        redis_client.get.return_value = b"Berlin"
        store = RedisQueryStore(redis_client, key="location")

        await store.set("Berlin")
        value = await store.get()

        redis_client.set.assert_awaited_once_with("classy-weather:location", "Berlin")
        redis_client.get.assert_awaited_once_with("classy-weather:location")
        assert value == "Berlin"

    @pytest.mark.asyncio
    async def test_redis_store_missing_key(self):
        redis_client = AsyncMock()
        redis_client.get.return_value = None

        assert await RedisQueryStore(redis_client).get() is None

    @pytest.mark.asyncio
    async def test_redis_store_close(self):
        redis_client = AsyncMock()

        await RedisQueryStore(redis_client).aclose()

        redis_client.aclose.assert_awaited_once()

    def test_store_must_implement_get_and_set(self):
        class WriteOnlyStore(QueryStore):
            async def set(self, value):
                pass

        with pytest.raises(TypeError):
            WriteOnlyStore()
