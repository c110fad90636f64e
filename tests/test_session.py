"""
Tests for the Session object lifecycle.
"""
import pytest

from navigator_cookiesession.cookie import SessionCookie
from navigator_cookiesession.exceptions import StoreError
from navigator_cookiesession.session import Session, split_record, to_record

from .conftest import SECRET, make_context

DEFAULT_MAX_AGE = 60 * 60 * 24 * 30


class RecordingStore:
    """Store double remembering every call."""

    def __init__(self, record=None):
        self.record = record
        self.calls = []

    async def get(self, sid):
        self.calls.append(("get", sid))
        return self.record

    async def set(self, sid, data):
        self.calls.append(("set", sid, data))

    async def destroy(self, sid):
        self.calls.append(("destroy", sid))

    async def touch(self, sid, data):
        self.calls.append(("touch", sid, data))


class BrokenStore(RecordingStore):
    async def set(self, sid, data):
        raise StoreError("set", sid)


@pytest.fixture
def ctx():
    return make_context()


@pytest.fixture
def cookie(ctx, signer):
    return SessionCookie(
        "connect.sid",
        ctx.set_cookie,
        lambda sid: signer.sign(sid, SECRET),
        max_age=DEFAULT_MAX_AGE,
    )


@pytest.fixture
def generated():
    calls = []

    async def generate():
        calls.append(1)
        return "bar", {"msg": "hello"}
    generate.calls = calls
    return generate


def make_session(store, generate, cookie, data=None):
    return Session(
        "foo",
        {"hello": "world"} if data is None else data,
        store,
        generate,
        cookie,
    )


class TestSessionBasics:
    """Identity and data access."""

    def test_id(self, cookie, generated):
        session = make_session(RecordingStore(), generated, cookie)
        assert session.id == "foo"

    def test_id_is_read_only(self, cookie, generated):
        session = make_session(RecordingStore(), generated, cookie)
        with pytest.raises(AttributeError):
            session.id = "other"

    def test_mapping_access(self, cookie, generated):
        session = make_session(RecordingStore(), generated, cookie)
        assert session["hello"] == "world"
        assert "hello" in session
        session["count"] = 1
        assert session.data == {"hello": "world", "count": 1}
        del session["count"]
        assert session.get("count", 0) == 0

    def test_non_mapping_data(self, cookie, generated):
        session = make_session(RecordingStore(), generated, cookie, data=[1, 2])
        assert "hello" not in session
        assert session.get("hello") is None
        with pytest.raises(TypeError):
            session["hello"] = "world"


class TestSessionLifecycle:
    """save, reload, destroy and regenerate."""

    async def test_save_writes_data_and_cookie(self, cookie, generated):
        store = RecordingStore()
        session = make_session(store, generated, cookie)
        await session.save()
        assert store.calls == [
            ("set", "foo", {"hello": "world", "cookie": cookie.to_dict()})
        ]

    async def test_save_does_not_emit_cookie(self, ctx, cookie, generated):
        session = make_session(RecordingStore(), generated, cookie)
        await session.save()
        assert ctx.headers() == []

    async def test_reload_gets_data(self, cookie, generated):
        store = RecordingStore({"reloaded": "data", "cookie": {"max_age": 5}})
        session = make_session(store, generated, cookie)
        await session.reload()
        assert store.calls == [("get", "foo")]
        assert session.data == {"reloaded": "data"}
        assert generated.calls == []

    async def test_reload_generates_when_missing(self, cookie, generated):
        store = RecordingStore(None)
        session = make_session(store, generated, cookie)
        await session.reload()
        assert generated.calls == [1]
        assert session.data == {"msg": "hello"}
        assert session.id == "foo"

    async def test_destroy(self, ctx, cookie, generated):
        store = RecordingStore()
        session = make_session(store, generated, cookie)
        await cookie.set_session_id("foo")
        await session.destroy()
        assert cookie.max_age == 0
        assert "Max-Age=0" in ctx.header("connect.sid")
        assert store.calls == [("destroy", "foo")]
        assert session.data == {"hello": "world"}

    async def test_regenerate(self, ctx, cookie, generated, signer):
        store = RecordingStore()
        session = make_session(store, generated, cookie)
        await cookie.set_session_id("foo")
        await session.regenerate()

        assert session.id == "bar"
        assert session.data == {"msg": "hello"}
        assert cookie.max_age == DEFAULT_MAX_AGE
        assert store.calls == [
            ("destroy", "foo"),
            ("set", "bar", {"msg": "hello", "cookie": cookie.to_dict()}),
        ]
        emitted = ctx.cookies["connect.sid"].value
        assert signer.verify(emitted, [SECRET]) == "bar"

    async def test_regenerate_fails_when_save_fails(self, cookie, generated):
        session = make_session(BrokenStore(), generated, cookie)
        with pytest.raises(StoreError):
            await session.regenerate()


class TestRecords:
    """Conversion between session data and stored records."""

    def test_mapping_record(self, cookie):
        record = to_record({"a": 1}, cookie)
        assert record["a"] == 1
        assert record["cookie"]["max_age"] == DEFAULT_MAX_AGE
        assert split_record(record) == ({"a": 1}, cookie.to_dict())

    def test_other_payloads_are_untouched(self, cookie):
        assert to_record([1, 2], cookie) == [1, 2]
        assert split_record([1, 2]) == ([1, 2], None)
        assert split_record({"a": 1}) == ({"a": 1}, None)

    def test_cookie_key_is_reserved(self, cookie):
        record = to_record({"a": 1, "cookie": "app value"}, cookie)
        assert record["cookie"] == cookie.to_dict()
        data, attrs = split_record(record)
        assert data == {"a": 1}
        assert attrs == cookie.to_dict()
