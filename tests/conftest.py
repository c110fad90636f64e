"""Shared fixtures for the session tests."""
import pytest
from aiohttp.test_utils import make_mocked_request

from navigator_cookiesession.context import AiohttpRequestContext
from navigator_cookiesession.crypto import CookieSigner
from navigator_cookiesession.storages import KVSessionStore, MemoryStorage

SECRET = "keyboard cat"


class FailingStorage(MemoryStorage):
    """KV engine whose reads blow up, like a backend that lost its connection."""

    async def get_item(self, key):
        raise ConnectionError("backend unavailable")


def make_context(cookie: str = None, name: str = "connect.sid") -> AiohttpRequestContext:
    """Request context for a GET request, optionally carrying a cookie."""
    headers = {}
    if cookie is not None:
        headers["Cookie"] = f"{name}={cookie}"
    request = make_mocked_request("GET", "/", headers=headers)
    return AiohttpRequestContext(request)


@pytest.fixture
def signer():
    return CookieSigner()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return KVSessionStore(storage)


@pytest.fixture
def secret():
    return SECRET
