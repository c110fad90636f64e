"""Session middleware.

``use_session`` resolves the session of one request: it verifies the
signed cookie, loads the data from the store (or starts a new session),
and exposes the result on the request context as ``session``,
``sessionId`` and ``sessionStore``.

``session_middleware`` and ``setup_session`` wire it into an aiohttp
application.
"""
import inspect
import logging
import uuid
from collections.abc import Mapping
from typing import Any, Optional, Union

from aiohttp import web

from .conf import (
    SESSION_CONFIG_KEY,
    SESSION_ID,
    SESSION_KEY,
    SESSION_STORAGE,
)
from .config import SessionConfig
from .context import AiohttpRequestContext, RequestContext
from .cookie import SessionCookie
from .exceptions import ConfigurationError
from .session import Session, split_record
from .storages.abstract import supports

logger = logging.getLogger("navigator.session")

# one day
DEFAULT_MAX_AGE = 60 * 60 * 24

_CONTEXT_KEY = "navigator_cookiesession.context"
SESSION_CONFIG = web.AppKey(SESSION_CONFIG_KEY, SessionConfig)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _default_genid(context: RequestContext) -> str:
    return str(uuid.uuid4())


def _default_generate() -> dict:
    return {}


class SessionResolver:
    """Builds the ``Session`` of one request from a ``SessionConfig``."""

    def __init__(self, context: RequestContext, config: SessionConfig):
        self.context = context
        self.config = config
        self.store = config.store
        self._genid = config.genid or _default_genid
        self._generate_data = config.generate or _default_generate

    async def generate(self) -> tuple[str, Any]:
        """New ``(sid, data)`` pair."""
        sid = await _resolve(self._genid(self.context))
        data = await _resolve(self._generate_data())
        return sid, data

    async def generate_data(self) -> Any:
        return await _resolve(self._generate_data())

    def sign(self, sid: str) -> str:
        return self.config.signer.sign(sid, self.config.signing_secret)

    async def create_cookie(
        self,
        sid: str,
        saved: Optional[Mapping[str, Any]] = None
    ) -> SessionCookie:
        """Session cookie for ``sid``, emitted right away.

        Attributes saved with the session record override the configured
        defaults, except name, path and domain.
        """
        options = self.config.cookie
        attrs = {
            "max_age": options.max_age or DEFAULT_MAX_AGE,
            "expires": options.expires,
            "http_only": options.http_only,
            "secure": options.secure,
            "same_site": options.same_site,
        }
        if saved:
            attrs.update(
                {k: v for k, v in saved.items() if k in SessionCookie.MUTABLE}
            )
        cookie = SessionCookie(
            self.config.name,
            self.context.set_cookie,
            self.sign,
            path=options.path,
            domain=options.domain,
            **attrs
        )
        await cookie.set_session_id(sid)
        return cookie

    def read_cookie(self) -> Optional[str]:
        raw = self.context.get_cookie(self.config.name)
        if not raw:
            return None
        sid = self.config.signer.verify(raw, self.config.secrets)
        if sid is False:
            logger.warning(
                "Session cookie %s failed verification, ignoring it",
                self.config.name
            )
            return None
        return sid

    async def resolve(self) -> Session:
        sid = self.read_cookie()
        record = None
        if sid:
            # storage errors propagate: a failing store is not a missing session
            record = await self.store.get(sid)

        if sid is None:
            sid, data = await self.generate()
            cookie = await self.create_cookie(sid)
            session = Session(sid, data, self.store, self.generate, cookie)
            logger.debug("New session %s", sid)
            if self.config.save_uninitialized:
                await session.save()
        elif record is None:
            # keep the id the client already has
            data = await self.generate_data()
            cookie = await self.create_cookie(sid)
            session = Session(sid, data, self.store, self.generate, cookie)
            logger.debug("Session %s has no stored data, starting over", sid)
            if self.config.save_uninitialized:
                await session.save()
        else:
            data, saved_cookie = split_record(record)
            cookie = await self.create_cookie(sid, saved_cookie)
            if supports(self.store, "touch"):
                await self.store.touch(sid, record)
            session = Session(sid, data, self.store, self.generate, cookie)
            logger.debug("Session %s loaded", sid)
        return session


async def use_session(
    context: RequestContext,
    config: Union[SessionConfig, Mapping[str, Any], None] = None,
    **kwargs
) -> Session:
    """Attach a session to the request ``context``.

    Calling it again for the same request returns the attached session and
    does nothing else.

    Build the ``SessionConfig`` once at startup and pass it on every call:
    a mapping or keyword options are validated on each call into a new
    config, with a new ``CookieSigner`` and an empty key cache.
    ``setup_session`` and ``session_middleware`` do this for you.

    Raises:
        ConfigurationError: store or secret missing.
        StoreError: the store failed while loading the session.
    """
    scope = context.context
    if scope.get(SESSION_KEY) is not None:
        return scope[SESSION_KEY]
    cfg = SessionConfig.build(config, **kwargs)
    session = await SessionResolver(context, cfg).resolve()
    scope[SESSION_KEY] = session
    scope[SESSION_ID] = session.id
    scope[SESSION_STORAGE] = cfg.store
    return session


# ---------------------------------------------------------------------------
# aiohttp integration
# ---------------------------------------------------------------------------

def request_context(request: web.Request) -> AiohttpRequestContext:
    """The ``AiohttpRequestContext`` bound to ``request``."""
    ctx = request.get(_CONTEXT_KEY)
    if ctx is None:
        ctx = AiohttpRequestContext(request)
        request[_CONTEXT_KEY] = ctx
    return ctx


def session_middleware(
    config: Union[SessionConfig, Mapping[str, Any], None] = None,
    **kwargs
):
    """aiohttp middleware attaching a session to every request."""
    cfg = SessionConfig.build(config, **kwargs)

    @web.middleware
    async def middleware(request: web.Request, handler):
        ctx = request_context(request)
        await use_session(ctx, cfg)
        try:
            response = await handler(request)
        except web.HTTPException as exc:
            if isinstance(exc, web.StreamResponse):
                ctx.apply(exc)
            raise
        ctx.apply(response)
        return response

    return middleware


def setup_session(
    app: web.Application,
    config: Union[SessionConfig, Mapping[str, Any], None] = None,
    **kwargs
) -> SessionConfig:
    """Install the session middleware on ``app``."""
    cfg = SessionConfig.build(config, **kwargs)
    app[SESSION_CONFIG] = cfg
    app.middlewares.append(session_middleware(cfg))
    logger.debug("Session middleware installed (cookie=%s)", cfg.name)
    return cfg


async def get_session(request: web.Request) -> Session:
    """Session of ``request``, resolving it when the middleware did not."""
    session = request.get(SESSION_KEY)
    if session is not None:
        return session
    cfg = request.app.get(SESSION_CONFIG)
    if cfg is None:
        raise ConfigurationError(
            "Session is not configured, call setup_session() first"
        )
    return await use_session(request_context(request), cfg)
