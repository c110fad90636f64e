"""Redis key-value engine for the session store."""
import logging
from typing import Any, Optional

import redis.asyncio as aioredis

from .. import serializers

logger = logging.getLogger("navigator.session.storage")


class RedisStorage:
    """``KVStorage`` over an async Redis client.

    Values are encoded with jsonpickle and written with ``SET key value EX``.
    """

    def __init__(self, client: aioredis.Redis):
        self._redis = client

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisStorage":
        return cls(aioredis.from_url(url, **kwargs))

    def __repr__(self) -> str:
        return f"<RedisStorage client={self._redis!r}>"

    @staticmethod
    def _key(key: Any) -> str:
        return key.decode("utf-8") if isinstance(key, bytes) else key

    async def get_item(self, key: str) -> Optional[Any]:
        value = await self._redis.get(key)
        if value is None:
            return None
        return serializers.decode(value)

    async def set_item(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        payload = serializers.encode(value)
        if ttl:
            await self._redis.set(key, payload, ex=ttl)
        else:
            await self._redis.set(key, payload)

    async def remove_item(self, key: str) -> None:
        await self._redis.delete(key)

    async def get_keys(self, base: str = "") -> list[str]:
        return [
            self._key(key)
            async for key in self._redis.scan_iter(match=f"{base}*")
        ]

    async def get_items(self, keys: list[str]) -> list[Any]:
        if not keys:
            return []
        values = await self._redis.mget(keys)
        return [serializers.decode(v) for v in values if v is not None]

    async def close(self) -> None:
        await self._redis.aclose()
        logger.debug("Redis session storage closed")
