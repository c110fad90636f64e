"""Session object attached to every request."""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, MutableMapping
from typing import Any, Generic, Optional, TypeVar

from .cookie import SessionCookie
from .storages.abstract import AbstractStore

logger = logging.getLogger("navigator.session")

T = TypeVar("T")

COOKIE_FIELD = "cookie"

Generator = Callable[[], Awaitable[tuple[str, Any]]]


def to_record(data: Any, cookie: SessionCookie) -> Any:
    """Session record as saved in the store.

    Mapping payloads carry the cookie attributes along, so the cookie
    lifetime chosen in one request is restored on the next one.
    """
    if isinstance(data, Mapping):
        record = dict(data)
        record[COOKIE_FIELD] = cookie.to_dict()
        return record
    return data


def split_record(record: Any) -> tuple[Any, Optional[dict]]:
    """Inverse of ``to_record``: (data, cookie attributes or None)."""
    if isinstance(record, Mapping) and COOKIE_FIELD in record:
        data = dict(record)
        attrs = data.pop(COOKIE_FIELD)
        return data, attrs if isinstance(attrs, Mapping) else None
    return record, None


class Session(Generic[T]):
    """Live session of the current request.

    When ``data`` is a mapping, ``save()`` stores it with the cookie
    attributes under the reserved ``"cookie"`` key (``COOKIE_FIELD``).
    An application value under that key is replaced on save and dropped
    on load.

    Args:
        sid: session identifier.
        data: application payload.
        store: session store.
        generate: coroutine function returning a new ``(sid, data)`` pair.
        cookie: the cookie carrying ``sid``.
    """

    def __init__(
        self,
        sid: str,
        data: T,
        store: AbstractStore,
        generate: Generator,
        cookie: SessionCookie
    ):
        self._id = sid
        self.data = data
        self._store = store
        self._generate = generate
        self.cookie = cookie

    def __repr__(self) -> str:
        return f"<Session id={self._id!r} data={self.data!r}>"

    @property
    def id(self) -> str:
        return self._id

    @property
    def store(self) -> AbstractStore:
        return self._store

    # Mapping access, when the payload is a mapping.

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(self.data, MutableMapping):
            raise TypeError("Session data does not support item assignment")
        self.data[key] = value

    def __delitem__(self, key: str) -> None:
        del self.data[key]

    def __contains__(self, key: object) -> bool:
        return isinstance(self.data, Mapping) and key in self.data

    def get(self, key: str, default: Any = None) -> Any:
        if isinstance(self.data, Mapping):
            return self.data.get(key, default)
        return default

    # Lifecycle.

    async def save(self) -> None:
        """Write the current data to the store."""
        await self._store.set(self._id, to_record(self.data, self.cookie))

    async def reload(self) -> None:
        """Load data from the store, or start over if it is gone."""
        record = await self._store.get(self._id)
        if record is None:
            logger.debug("Session %s not found on reload, regenerating data", self._id)
            _, self.data = await self._generate()
            return
        self.data, _ = split_record(record)

    async def destroy(self) -> None:
        """Expire the cookie on the client and remove the stored data."""
        self.cookie.max_age = 0
        await self._store.destroy(self._id)
        logger.debug("Session %s destroyed", self._id)

    async def regenerate(self) -> None:
        """Replace the session with a new id and fresh data."""
        old = self._id
        await self._store.destroy(old)
        self._id, self.data = await self._generate()
        await asyncio.gather(
            self.cookie.set_session_id(self._id),
            self.save()
        )
        logger.debug("Session %s regenerated as %s", old, self._id)
