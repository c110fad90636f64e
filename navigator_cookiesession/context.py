"""Request/response adapter used by the session middleware.

The session core only needs to read a cookie from the request, write an
outbound cookie and keep request-scoped values; ``RequestContext``
describes that and ``AiohttpRequestContext`` implements it for aiohttp.
"""
from collections.abc import MutableMapping
from http.cookies import SimpleCookie
from typing import Any, Optional, Protocol, runtime_checkable
from urllib.parse import unquote

from aiohttp import web

_RESPONSE_COOKIE_ATTRS = {
    "expires": "expires",
    "domain": "domain",
    "max_age": "max-age",
    "path": "path",
    "secure": "secure",
    "httponly": "httponly",
    "samesite": "samesite",
}


@runtime_checkable
class RequestContext(Protocol):
    """What the session middleware needs from the host framework."""

    @property
    def context(self) -> MutableMapping[str, Any]: ...

    def get_cookie(self, name: str) -> Optional[str]: ...

    def set_cookie(self, name: str, value: str, **attributes: Any) -> None: ...


class AiohttpRequestContext:
    """Adapter over an aiohttp ``web.Request``.

    Request-scoped values are stored on the request itself (it is a
    mutable mapping). Outbound cookies are kept in a ``SimpleCookie`` until
    ``apply()`` copies them to the response; writing the same name again
    replaces the previous cookie.
    """

    def __init__(self, request: web.Request):
        self.request = request
        self.cookies: SimpleCookie = SimpleCookie()
        self._attributes: dict[str, dict[str, Any]] = {}

    def __repr__(self) -> str:
        return f"<AiohttpRequestContext {self.request.method} {self.request.path}>"

    @property
    def context(self) -> MutableMapping[str, Any]:
        return self.request

    def get_cookie(self, name: str) -> Optional[str]:
        """Cookie value, percent-decoded.

        Other signed-cookie implementations write the value URL-encoded
        (``s%3A<id>.<sig>``); decoding lets those cookies verify.
        """
        value = self.request.cookies.get(name)
        if value is None:
            return None
        return unquote(value)

    def set_cookie(self, name: str, value: str, **attributes: Any) -> None:
        self.cookies.pop(name, None)
        self.cookies[name] = value
        morsel = self.cookies[name]
        for attr, key in _RESPONSE_COOKIE_ATTRS.items():
            val = attributes.get(attr)
            if val is None or val is False:
                continue
            morsel[key] = val
        self._attributes[name] = dict(attributes)

    def headers(self) -> list[str]:
        """Pending ``Set-Cookie`` header values."""
        return [morsel.OutputString() for morsel in self.cookies.values()]

    def header(self, name: str) -> Optional[str]:
        morsel = self.cookies.get(name)
        return morsel.OutputString() if morsel is not None else None

    def apply(self, response: web.StreamResponse) -> None:
        """Write the pending cookies on ``response``."""
        for name, morsel in self.cookies.items():
            response.set_cookie(name, morsel.value, **self._attributes[name])
