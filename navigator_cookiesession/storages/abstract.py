"""Session Store contract.

Every storage used by the session middleware implements the required
coroutines ``get``, ``set``, ``destroy`` and ``touch``. ``all``, ``clear``
and ``length`` are optional: callers check them with ``supports()``.

A failure in the underlying backend must be raised, never reported as a
missing session.
"""
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

OPTIONAL_METHODS = ("all", "clear", "length")


@runtime_checkable
class SessionStore(Protocol):
    """Required subset of the store contract, for duck-typed stores."""

    async def get(self, sid: str) -> Optional[Any]: ...

    async def set(self, sid: str, data: Any) -> None: ...

    async def destroy(self, sid: str) -> None: ...


class AbstractStore(ABC, Generic[T]):
    """Base class for session stores.

    ``T`` is the application session payload; the store moves it around
    without looking into it.
    """

    @abstractmethod
    async def get(self, sid: str) -> Optional[T]:
        """Return the data saved for ``sid`` or None."""

    @abstractmethod
    async def set(self, sid: str, data: T) -> None:
        """Save ``data`` under ``sid``, replacing any previous value."""

    @abstractmethod
    async def destroy(self, sid: str) -> None:
        """Remove the session ``sid``."""

    @abstractmethod
    async def touch(self, sid: str, data: T) -> None:
        """Refresh the expiration of ``sid``."""


def supports(store: Any, method: str) -> bool:
    """True when ``store`` provides the (optional) coroutine ``method``."""
    return callable(getattr(store, method, None))
