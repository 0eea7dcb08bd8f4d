# nosec B101


from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from domain.exceptions.currency import CacheReadError, CacheWriteError
from infrastructure.cache.redis_cache import RedisKeyValueStore


@pytest.mark.asyncio
async def test_get_cache_hit_returns_string():
    mock_redis = AsyncMock()
    mock_redis.get.return_value = '{"rates": {}}'

    store = RedisKeyValueStore(redis_client=mock_redis)
    result = await store.get('exchangeRates')

    assert result == '{"rates": {}}'
    mock_redis.get.assert_called_once_with('exchangeRates')


@pytest.mark.asyncio
async def test_get_decodes_bytes():
    mock_redis = AsyncMock()
    mock_redis.get.return_value = b'value'

    store = RedisKeyValueStore(redis_client=mock_redis)

    assert await store.get('exchangeRates') == 'value'


@pytest.mark.asyncio
async def test_get_cache_miss_returns_none():
    mock_redis = AsyncMock()
    mock_redis.get.return_value = None

    store = RedisKeyValueStore(redis_client=mock_redis)

    assert await store.get('exchangeRates') is None


@pytest.mark.asyncio
async def test_set_stores_with_ttl():
    mock_redis = AsyncMock()
    store = RedisKeyValueStore(redis_client=mock_redis)

    await store.set('exchangeRates', 'payload', timedelta(days=7))

    mock_redis.setex.assert_called_once_with('exchangeRates', timedelta(days=7), 'payload')


@pytest.mark.asyncio
async def test_redis_errors_are_wrapped():
    mock_redis = AsyncMock()
    mock_redis.get.side_effect = RedisConnectionError('Connection refused')
    mock_redis.setex.side_effect = RedisConnectionError('Connection refused')
    store = RedisKeyValueStore(redis_client=mock_redis)

    with pytest.raises(CacheReadError):
        await store.get('exchangeRates')
    with pytest.raises(CacheWriteError):
        await store.set('exchangeRates', 'payload', timedelta(days=7))


@pytest.mark.asyncio
async def test_undecodable_value_raises_read_error():
    mock_redis = AsyncMock()
    mock_redis.get.return_value = b'\xff\xfe garbage \x80'
    store = RedisKeyValueStore(redis_client=mock_redis)

    with pytest.raises(CacheReadError):
        await store.get('exchangeRates')


@pytest.mark.asyncio
async def test_decode_error_from_client_is_wrapped():
    mock_redis = AsyncMock()
    mock_redis.get.side_effect = UnicodeDecodeError('utf-8', b'\xff', 0, 1, 'invalid start byte')
    store = RedisKeyValueStore(redis_client=mock_redis)

    with pytest.raises(CacheReadError):
        await store.get('exchangeRates')
