"""Session cookie descriptor.

Holds the attributes of the outbound session cookie. Every change to a
mutable attribute writes the Set-Cookie header again with the current
signed value, since handlers may adjust the cookie at any point before the
response is sent.
"""
from collections.abc import Callable
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, Optional, Union

from .exceptions import ImmutableCookieAttribute

Emitter = Callable[..., None]
Signer = Callable[[str], str]

SameSite = Union[bool, str, None]


def normalize_samesite(value: SameSite) -> Optional[str]:
    if value is True:
        return "Strict"
    if not value:
        return None
    return str(value).capitalize()


def format_expires(value: Union[datetime, str, None]) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


class SessionCookie:
    """Cookie carrying the signed session id.

    ``name``, ``path`` and ``domain`` are fixed once the cookie exists;
    ``max_age``, ``expires``, ``http_only``, ``secure`` and ``same_site``
    can be changed and are re-emitted immediately.
    """

    MUTABLE = ("max_age", "expires", "http_only", "secure", "same_site")

    def __init__(
        self,
        name: str,
        emit: Emitter,
        sign: Signer,
        *,
        path: str = "/",
        domain: Optional[str] = None,
        max_age: Optional[int] = None,
        expires: Union[datetime, str, None] = None,
        http_only: bool = True,
        secure: bool = True,
        same_site: SameSite = None
    ):
        self._name = name
        self._path = path
        self._domain = domain
        self._max_age = max_age
        self._expires = expires
        self._http_only = http_only
        self._secure = secure
        self._same_site = same_site
        self._emit_cookie = emit
        self._sign = sign
        self._value: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"<SessionCookie name={self._name!r} path={self._path!r} "
            f"max_age={self._max_age!r}>"
        )

    # --- fixed attributes ---

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        raise ImmutableCookieAttribute("name")

    @property
    def path(self) -> str:
        return self._path

    @path.setter
    def path(self, value: str) -> None:
        raise ImmutableCookieAttribute("path")

    @property
    def domain(self) -> Optional[str]:
        return self._domain

    @domain.setter
    def domain(self, value: Optional[str]) -> None:
        raise ImmutableCookieAttribute("domain")

    # --- mutable attributes ---

    @property
    def max_age(self) -> Optional[int]:
        return self._max_age

    @max_age.setter
    def max_age(self, value: Optional[int]) -> None:
        self._max_age = value
        self.emit()

    @property
    def expires(self) -> Union[datetime, str, None]:
        return self._expires

    @expires.setter
    def expires(self, value: Union[datetime, str, None]) -> None:
        self._expires = value
        self.emit()

    @property
    def http_only(self) -> bool:
        return self._http_only

    @http_only.setter
    def http_only(self, value: bool) -> None:
        self._http_only = value
        self.emit()

    @property
    def secure(self) -> bool:
        return self._secure

    @secure.setter
    def secure(self, value: bool) -> None:
        self._secure = value
        self.emit()

    @property
    def same_site(self) -> SameSite:
        return self._same_site

    @same_site.setter
    def same_site(self, value: SameSite) -> None:
        self._same_site = value
        self.emit()

    # --- emission ---

    @property
    def value(self) -> Optional[str]:
        """Current signed cookie value."""
        return self._value

    async def set_session_id(self, sid: str) -> None:
        """Sign ``sid`` and emit the cookie with it."""
        self._value = self._sign(sid)
        self.emit()

    def emit(self) -> None:
        if self._value is None:
            return
        self._emit_cookie(self._name, self._value, **self.options())

    def update(self, **attributes: Any) -> None:
        """Change several mutable attributes, emitting once."""
        for attr, value in attributes.items():
            if attr in ("name", "path", "domain"):
                raise ImmutableCookieAttribute(attr)
            if attr not in self.MUTABLE:
                raise AttributeError(f"Unknown cookie attribute: {attr}")
        for attr, value in attributes.items():
            setattr(self, f"_{attr}", value)
        self.emit()

    def options(self) -> dict[str, Any]:
        """Keyword arguments for aiohttp ``set_cookie``."""
        opts = {
            "path": self._path,
            "httponly": self._http_only,
            "secure": self._secure,
        }
        if self._domain:
            opts["domain"] = self._domain
        if self._max_age is not None:
            opts["max_age"] = self._max_age
        expires = format_expires(self._expires)
        if expires is not None:
            opts["expires"] = expires
        samesite = normalize_samesite(self._same_site)
        if samesite is not None:
            opts["samesite"] = samesite
        return opts

    def to_dict(self) -> dict[str, Any]:
        """Attributes persisted with the session record."""
        return {
            "path": self._path,
            "domain": self._domain,
            "max_age": self._max_age,
            "expires": self._expires,
            "http_only": self._http_only,
            "secure": self._secure,
            "same_site": self._same_site,
        }
