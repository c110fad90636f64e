"""
Cookie Crypto Core: Key caching, cookie signing and verification.

Signed cookies use the cookie-signature wire format:

    s:<identifier>.<base64(HMAC-SHA256(identifier)) without padding>

Cookies issued by other implementations of that format verify unchanged.

Security Note:
    Never log secrets, signatures or signed cookie values.
"""
import base64
import binascii
from collections.abc import Iterable
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from .exceptions import SigningError

COOKIE_PREFIX = "s:"
SEPARATOR = "."
DIGEST_SIZE = 32  # HMAC-SHA256
SIGNATURE_LENGTH = 43  # base64 of 32 bytes, padding stripped
# prefix + separator + signature
MIN_COOKIE_LENGTH = len(COOKIE_PREFIX) + len(SEPARATOR) + SIGNATURE_LENGTH

USAGE_SIGN = "sign"
USAGE_VERIFY = "verify"


# ---------------------------------------------------------------------------
# Key material
# ---------------------------------------------------------------------------

class HMACKey:
    """HMAC-SHA256 key bound to one secret and one usage (sign or verify)."""

    __slots__ = ("_key", "usage")

    def __init__(self, secret: str, usage: str):
        if usage not in (USAGE_SIGN, USAGE_VERIFY):
            raise SigningError(f"Unsupported key usage: {usage}")
        self._key = secret.encode("utf-8")
        self.usage = usage

    def __repr__(self) -> str:
        return f"<HMACKey usage={self.usage}>"

    def _hmac(self, message: bytes) -> hmac.HMAC:
        h = hmac.HMAC(self._key, hashes.SHA256())
        h.update(message)
        return h

    def sign(self, message: bytes) -> bytes:
        if self.usage != USAGE_SIGN:
            raise SigningError("Key was not derived for signing")
        return self._hmac(message).finalize()

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Constant-time check of ``signature`` over ``message``."""
        if self.usage != USAGE_VERIFY:
            raise SigningError("Key was not derived for verification")
        try:
            self._hmac(message).verify(signature)
        except InvalidSignature:
            return False
        return True


class KeyCache:
    """Derived key handles, cached per secret string and usage.

    Entries are never evicted: the set of secrets is configured by the
    operator and stays small for the process lifetime.
    """

    def __init__(self):
        self._sign_keys: dict[str, HMACKey] = {}
        self._verify_keys: dict[str, HMACKey] = {}

    def get_signing_key(self, secret: str) -> HMACKey:
        key = self._sign_keys.get(secret)
        if key is None:
            key = HMACKey(secret, USAGE_SIGN)
            self._sign_keys[secret] = key
        return key

    def get_verification_key(self, secret: str) -> HMACKey:
        key = self._verify_keys.get(secret)
        if key is None:
            key = HMACKey(secret, USAGE_VERIFY)
            self._verify_keys[secret] = key
        return key

    def clear(self) -> None:
        self._sign_keys.clear()
        self._verify_keys.clear()

    def __len__(self) -> int:
        return len(self._sign_keys) + len(self._verify_keys)


# ---------------------------------------------------------------------------
# Signature encoding
# ---------------------------------------------------------------------------

def encode_signature(digest: bytes) -> str:
    """Standard base64 alphabet, trailing ``=`` stripped."""
    return base64.b64encode(digest).decode("ascii").rstrip("=")


def decode_signature(signature: str) -> Union[bytes, None]:
    """Decode an unpadded signature, returns None when it is not base64.

    Both the standard and the URL-safe alphabets are accepted.
    """
    if len(signature) != SIGNATURE_LENGTH:
        return None
    normalized = signature.replace("-", "+").replace("_", "/") + "="
    try:
        digest = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError):
        return None
    if len(digest) != DIGEST_SIZE:
        return None
    return digest


# ---------------------------------------------------------------------------
# Cookie signer
# ---------------------------------------------------------------------------

class CookieSigner:
    """Sign and verify session cookie values.

    Holds its own ``KeyCache``; create one signer at startup and share it
    across requests so each secret is derived once.
    """

    def __init__(self, keys: KeyCache = None):
        self.keys = keys if keys is not None else KeyCache()

    def sign(self, value: str, secret: str) -> str:
        """Return ``s:<value>.<signature>``.

        Raises:
            SigningError: if value or secret is empty.
        """
        if not value:
            raise SigningError("Cookie value to sign is required")
        if not secret:
            raise SigningError("Secret key is required for signing")
        key = self.keys.get_signing_key(secret)
        digest = key.sign(value.encode("utf-8"))
        return f"{COOKIE_PREFIX}{value}{SEPARATOR}{encode_signature(digest)}"

    def unpack(self, cookie_value: str) -> Union[tuple[str, bytes], None]:
        """Split a signed value into (identifier, digest).

        The signature has a fixed length, so the split is anchored at the
        end of the string; the identifier may contain ``.`` and ``:``.
        """
        if not isinstance(cookie_value, str):
            return None
        if len(cookie_value) < MIN_COOKIE_LENGTH:
            return None
        if not cookie_value.startswith(COOKIE_PREFIX):
            return None
        sep = len(cookie_value) - SIGNATURE_LENGTH - len(SEPARATOR)
        if cookie_value[sep] != SEPARATOR:
            return None
        identifier = cookie_value[len(COOKIE_PREFIX):sep]
        if not identifier:
            return None
        digest = decode_signature(cookie_value[sep + 1:])
        if digest is None:
            return None
        return identifier, digest

    def verify(
        self,
        cookie_value: str,
        secrets: Union[str, Iterable[str]]
    ) -> Union[str, bool]:
        """Return the identifier embedded in ``cookie_value``, or False.

        Secrets are tried in order, so cookies signed with a retired secret
        keep working while it remains in the list.
        """
        if isinstance(secrets, str):
            secrets = [secrets]
        parts = self.unpack(cookie_value)
        if parts is None:
            return False
        identifier, digest = parts
        message = identifier.encode("utf-8")
        for secret in secrets:
            if not secret:
                continue
            key = self.keys.get_verification_key(secret)
            if key.verify(message, digest):
                return identifier
        return False
