"""Session Exceptions.

Errors are split so callers can tell apart what to retry:
- ``ConfigurationError``: misuse at setup time, never retried.
- ``SigningError``: invalid input to the cookie signer, a caller bug.
- ``StoreError``: the storage backend failed, may be transient.

A cookie that fails verification is not an error: ``CookieSigner.verify``
returns ``False`` for it.
"""


class SessionError(Exception):
    """Base class for every error raised by navigator_cookiesession."""


class ConfigurationError(SessionError):
    """Missing or invalid session configuration."""


class ImmutableCookieAttribute(ConfigurationError, AttributeError):
    """Raised when changing the name, path or domain of a session cookie.

    Changing any of them makes the browser treat the result as a different
    cookie instead of updating the existing one.
    """

    def __init__(self, attribute: str):
        self.attribute = attribute
        super().__init__(
            f"Session cookie attribute '{attribute}' cannot be changed "
            "after the cookie was created"
        )


class SigningError(SessionError, ValueError):
    """Invalid value or secret passed to the cookie signer."""


class StoreError(SessionError):
    """The session storage backend failed.

    The original backend exception is always chained as ``__cause__``.
    """

    def __init__(self, operation: str, key: str = None, message: str = None):
        self.operation = operation
        self.key = key
        msg = message or f"Session storage failed during {operation}"
        if key is not None:
            msg = f"{msg} (key={key})"
        super().__init__(msg)
