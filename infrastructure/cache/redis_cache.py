from datetime import timedelta

from redis import asyncio as redis
from redis.exceptions import RedisError

from domain.exceptions.currency import CacheReadError, CacheWriteError


class RedisKeyValueStore:
    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    async def get(self, key: str) -> str | None:
        try:
            data = await self.redis.get(key)
            if isinstance(data, bytes):
                data = data.decode('utf-8')
        except RedisError as e:
            raise CacheReadError(f'Redis read failed for {key}: {e}') from e
        except UnicodeDecodeError as e:
            raise CacheReadError(f'Invalid utf-8 data in {key}') from e

        return data

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        try:
            await self.redis.setex(key, ttl, value)
        except RedisError as e:
            raise CacheWriteError(f'Redis write failed for {key}: {e}') from e

    async def close(self) -> None:
        await self.redis.aclose()
