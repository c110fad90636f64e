"""Navigator Cookie Session.

Signed-cookie sessions for aiohttp, backed by a pluggable key-value store.
"""
from .version import (
    __title__,
    __description__,
    __version__,
    __author__,
    __author_email__,
    __license__,
)
from .conf import SESSION_KEY, SESSION_ID, SESSION_STORAGE
from .exceptions import (
    SessionError,
    ConfigurationError,
    ImmutableCookieAttribute,
    SigningError,
    StoreError,
)
from .crypto import CookieSigner, KeyCache, HMACKey
from .config import SessionConfig, CookieOptions
from .cookie import SessionCookie
from .session import COOKIE_FIELD, Session
from .storages import (
    AbstractStore,
    SessionStore,
    KVSessionStore,
    MemoryStorage,
    RedisStorage,
)
from .context import RequestContext, AiohttpRequestContext
from .middleware import (
    use_session,
    request_context,
    session_middleware,
    setup_session,
    get_session,
)

__all__ = (
    "SESSION_KEY",
    "SESSION_ID",
    "SESSION_STORAGE",
    "SessionError",
    "ConfigurationError",
    "ImmutableCookieAttribute",
    "SigningError",
    "StoreError",
    "CookieSigner",
    "KeyCache",
    "HMACKey",
    "SessionConfig",
    "CookieOptions",
    "SessionCookie",
    "COOKIE_FIELD",
    "Session",
    "AbstractStore",
    "SessionStore",
    "KVSessionStore",
    "MemoryStorage",
    "RedisStorage",
    "RequestContext",
    "AiohttpRequestContext",
    "use_session",
    "request_context",
    "session_middleware",
    "setup_session",
    "get_session",
)
