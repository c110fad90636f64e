"""In-process key-value engine with per-key expiration.

Useful for development and tests; items are lost on restart and are not
shared between processes.
"""
import copy
import time
from typing import Any, Optional


class MemoryStorage:
    """Dict-backed ``KVStorage``.

    Values are deep-copied on the way in and out, so a caller mutating a
    returned value never changes the stored one.
    """

    def __init__(self, clock=time.monotonic):
        self._items: dict[str, tuple[Any, Optional[float]]] = {}
        self._clock = clock

    def __repr__(self) -> str:
        return f"<MemoryStorage items={len(self._items)}>"

    def _expired(self, expires: Optional[float]) -> bool:
        return expires is not None and self._clock() >= expires

    def _lookup(self, key: str) -> Optional[Any]:
        entry = self._items.get(key)
        if entry is None:
            return None
        value, expires = entry
        if self._expired(expires):
            del self._items[key]
            return None
        return value

    async def get_item(self, key: str) -> Optional[Any]:
        value = self._lookup(key)
        return copy.deepcopy(value) if value is not None else None

    async def set_item(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        expires = self._clock() + ttl if ttl else None
        self._items[key] = (copy.deepcopy(value), expires)

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def has_item(self, key: str) -> bool:
        return self._lookup(key) is not None

    async def get_keys(self, base: str = "") -> list[str]:
        return [
            key for key in list(self._items)
            if key.startswith(base) and self._lookup(key) is not None
        ]

    async def get_items(self, keys: list[str]) -> list[Any]:
        items = []
        for key in keys:
            value = self._lookup(key)
            if value is not None:
                items.append(copy.deepcopy(value))
        return items

    async def clear(self) -> None:
        self._items.clear()
