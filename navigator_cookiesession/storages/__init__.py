"""Session storages."""
from .abstract import AbstractStore, SessionStore, supports
from .kv import KVSessionStore, KVStorage
from .memory import MemoryStorage
from .redis_backend import RedisStorage

__all__ = (
    "AbstractStore",
    "SessionStore",
    "supports",
    "KVSessionStore",
    "KVStorage",
    "MemoryStorage",
    "RedisStorage",
)
