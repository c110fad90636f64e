"""
Key-Value Session Store: session contract over a generic KV engine.

Sessions are saved under ``<prefix>:<sid>`` with a TTL that is either a
fixed number of seconds or computed from the session record.
"""
import asyncio
import logging
from collections.abc import Callable
from typing import Any, Optional, Protocol, Union, runtime_checkable

from ..conf import SESSION_PREFIX, SESSION_TIMEOUT
from ..exceptions import StoreError
from .abstract import AbstractStore

logger = logging.getLogger("navigator.session.storage")

TTL = Union[int, Callable[[Any], int]]


@runtime_checkable
class KVStorage(Protocol):
    """Operations a key-value engine must offer to back ``KVSessionStore``."""

    async def get_item(self, key: str) -> Optional[Any]: ...

    async def set_item(self, key: str, value: Any, ttl: int) -> None: ...

    async def remove_item(self, key: str) -> None: ...

    async def get_keys(self, base: str) -> list[str]: ...

    async def get_items(self, keys: list[str]) -> list[Any]: ...


class KVSessionStore(AbstractStore):
    """Session store over any ``KVStorage`` engine.

    Args:
        storage: the key-value engine.
        prefix: namespace for session keys (default ``sess``).
        ttl: seconds, or a callable receiving the session record and
            returning seconds. A TTL of zero or less deletes the session.
    """

    def __init__(
        self,
        storage: KVStorage,
        prefix: str = SESSION_PREFIX,
        ttl: TTL = SESSION_TIMEOUT
    ):
        self.storage = storage
        self.prefix = prefix
        self.ttl = ttl

    def __repr__(self) -> str:
        return f"<KVSessionStore prefix={self.prefix!r} storage={self.storage!r}>"

    def get_key(self, sid: str) -> str:
        return ":".join([self.prefix, sid])

    def get_ttl(self, data: Any) -> int:
        if callable(self.ttl):
            return self.ttl(data)
        return self.ttl

    async def _call(self, operation: str, key: Optional[str], coro):
        try:
            return await coro
        except StoreError:
            raise
        except Exception as err:
            logger.error(
                "Session storage error during %s: %s", operation, err
            )
            raise StoreError(operation, key) from err

    async def get(self, sid: str) -> Optional[Any]:
        key = self.get_key(sid)
        item = await self._call("get", key, self.storage.get_item(key))
        return item

    async def set(self, sid: str, data: Any) -> None:
        """Save the session; a TTL <= 0 removes it instead."""
        ttl = self.get_ttl(data)
        if ttl > 0:
            key = self.get_key(sid)
            await self._call("set", key, self.storage.set_item(key, data, ttl))
        else:
            logger.debug("Session TTL is %s, removing instead of saving", ttl)
            await self.destroy(sid)

    async def destroy(self, sid: str) -> None:
        key = self.get_key(sid)
        await self._call("destroy", key, self.storage.remove_item(key))

    async def touch(self, sid: str, data: Any) -> None:
        # re-writing the record is the only portable way to bump a TTL
        await self.set(sid, data)

    async def _all_keys(self) -> list[str]:
        base = f"{self.prefix}:"
        keys = await self._call("keys", None, self.storage.get_keys(base))
        # engines may match loosely, only keep our namespace
        return [k for k in keys if k.startswith(base)]

    async def all(self) -> list[Any]:
        keys = await self._all_keys()
        if not keys:
            return []
        return await self._call("all", None, self.storage.get_items(keys))

    async def clear(self) -> None:
        keys = await self._all_keys()
        await asyncio.gather(
            *[self._call("clear", k, self.storage.remove_item(k)) for k in keys]
        )

    async def length(self) -> int:
        keys = await self._all_keys()
        return len(keys)
