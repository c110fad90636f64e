"""
Session Configuration: validated settings for the session middleware.

A ``SessionConfig`` is built once at startup and shared by every request;
it owns the ``CookieSigner`` whose key cache lives as long as the config.
"""
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from .conf import (
    SESSION_COOKIE_HTTPONLY,
    SESSION_COOKIE_PATH,
    SESSION_COOKIE_SAMESITE,
    SESSION_COOKIE_SECURE,
    SESSION_NAME,
    SESSION_SAVE_UNINITIALIZED,
    SESSION_SECRET,
)
from .crypto import CookieSigner
from .exceptions import ConfigurationError
from .storages.abstract import SessionStore


class CookieOptions(BaseModel):
    """Default attributes of the session cookie."""

    domain: Optional[str] = None
    expires: Union[datetime, str, None] = None
    http_only: bool = Field(default=SESSION_COOKIE_HTTPONLY, alias="httpOnly")
    max_age: Optional[int] = Field(default=None, alias="maxAge")
    path: str = SESSION_COOKIE_PATH
    same_site: Union[bool, str, None] = Field(
        default=SESSION_COOKIE_SAMESITE, alias="sameSite"
    )
    secure: bool = SESSION_COOKIE_SECURE

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("same_site")
    @classmethod
    def validate_samesite(cls, v):
        """Only the policies browsers understand."""
        if isinstance(v, str) and v.lower() not in ("lax", "strict", "none"):
            raise ValueError(f"Unsupported SameSite policy: {v}")
        return v


class SessionConfig(BaseModel):
    """Validated session middleware configuration."""

    store: Any
    secret: Union[str, list[str]]
    cookie: CookieOptions = Field(default_factory=CookieOptions)
    name: str = SESSION_NAME
    genid: Optional[Callable[..., Any]] = None
    generate: Optional[Callable[..., Any]] = None
    save_uninitialized: bool = Field(
        default=SESSION_SAVE_UNINITIALIZED, alias="saveUninitialized"
    )
    signer: CookieSigner = Field(default_factory=CookieSigner, exclude=True)

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        extra="forbid",
    )

    @field_validator("store")
    @classmethod
    def validate_store(cls, v):
        """Store must implement the session store contract."""
        if v is None:
            raise ValueError("Session store is required")
        if not isinstance(v, SessionStore):
            raise ValueError(
                f"{type(v).__name__} does not implement get/set/destroy"
            )
        return v

    @field_validator("secret")
    @classmethod
    def validate_secret(cls, v):
        """Normalize to a non-empty list; the last secret signs."""
        secrets = [v] if isinstance(v, str) else list(v)
        if not secrets or not all(secrets):
            raise ValueError("Session secret is required")
        return secrets

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Session cookie name cannot be empty")
        return v

    @property
    def secrets(self) -> list[str]:
        """All secrets accepted when verifying a cookie."""
        return self.secret

    @property
    def signing_secret(self) -> str:
        return self.secret[-1]

    @classmethod
    def build(
        cls,
        config: Union["SessionConfig", Mapping[str, Any], None] = None,
        **kwargs
    ) -> "SessionConfig":
        """Return a ``SessionConfig`` from a config, a mapping or keywords.

        Raises:
            ConfigurationError: store or secret missing, or invalid options.
        """
        if isinstance(config, SessionConfig):
            if not kwargs:
                return config
            # keeps the signer, and with it the derived keys
            options = dict(config)
        else:
            options = dict(config or {})
        options.update(kwargs)
        validate_config(options)
        try:
            return cls.model_validate(options)
        except ValidationError as err:
            raise ConfigurationError(
                f"Invalid session configuration: {err}"
            ) from err

    @classmethod
    def from_env(cls, store: Any, **overrides) -> "SessionConfig":
        """Create a SessionConfig using defaults from the environment.

        Raises:
            ConfigurationError: if SESSION_SECRET is unset and no secret
                was given.
        """
        options = {"store": store, "secret": SESSION_SECRET}
        options.update(overrides)
        return cls.build(options)


def validate_config(options: Mapping[str, Any]) -> None:
    """Fail fast when the required options are missing."""
    if options.get("store") is None:
        raise ConfigurationError("[session] Session store is required!")
    if not options.get("secret"):
        raise ConfigurationError("[session] Session secret is required!")
