"""Tests for the in-process key and state stores."""

from datetime import UTC, datetime, timedelta

from oidc_issuer.crypto.types import TokenRecord
from oidc_issuer.store.memory import InMemoryKeyStore, InMemoryStateStore
from oidc_issuer.store.types import PublishedState, key_prefix

JWK = {"kty": "RSA", "kid": "k", "n": "abc", "e": "AQAB"}


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


async def _collect(store: InMemoryKeyStore, prefix: str) -> list[str]:
    kids: list[str] = []
    page_token = None
    while True:
        page = await store.list(prefix, page_token)
        kids.extend(r.kid for r in page.records)
        page_token = page.next_page_token
        if page_token is None:
            return kids


class TestInMemoryKeyStore:
    """Tests for put/list semantics."""

    async def test_record_timestamps_follow_ttl(self) -> None:
        clock = _Clock()
        store = InMemoryKeyStore(clock=clock)
        await store.put("default", "k1", JWK, 600)
        page = await store.list(key_prefix("default"))
        record = page.records[0]
        assert record.created_at == clock.now
        assert record.expires_at - record.created_at == timedelta(seconds=600)
        assert record.storage_key == "key:default:k1"

    async def test_expired_records_hidden(self) -> None:
        clock = _Clock()
        store = InMemoryKeyStore(clock=clock)
        await store.put("default", "short", JWK, 60)
        await store.put("default", "long", JWK, 600)
        clock.now += timedelta(seconds=60)
        assert await _collect(store, key_prefix("default")) == ["long"]

    async def test_scoped_to_keyring(self) -> None:
        store = InMemoryKeyStore()
        await store.put("default", "a", JWK, 600)
        await store.put("default-2", "b", JWK, 600)
        await store.put("v2", "c", JWK, 600)
        assert await _collect(store, key_prefix("default")) == ["a"]
        assert await _collect(store, key_prefix("v2")) == ["c"]

    async def test_pagination_visits_each_record_once(self) -> None:
        store = InMemoryKeyStore(page_size=2)
        kids = [f"k{i}" for i in range(5)]
        for kid in kids:
            await store.put("default", kid, JWK, 600)
        first = await store.list(key_prefix("default"))
        assert len(first.records) == 2
        assert first.next_page_token == "key:default:k1"
        assert await _collect(store, key_prefix("default")) == kids

    async def test_exact_page_has_no_next_token(self) -> None:
        store = InMemoryKeyStore(page_size=2)
        await store.put("default", "a", JWK, 600)
        await store.put("default", "b", JWK, 600)
        page = await store.list(key_prefix("default"))
        assert page.next_page_token is None

    async def test_empty(self) -> None:
        page = await InMemoryKeyStore().list(key_prefix("default"))
        assert page.records == []
        assert page.next_page_token is None


class TestInMemoryStateStore:
    """Tests for single-slot records."""

    async def test_starts_empty(self) -> None:
        store = InMemoryStateStore()
        assert await store.get_token() is None
        assert await store.get_timer_handle() is None
        assert await store.get_published() is None

    async def test_overwrites(self) -> None:
        store = InMemoryStateStore()
        first = TokenRecord(token="a", expires_at=1, config_fingerprint="x")
        await store.set_token(first)
        await store.set_token(first.model_copy(update={"token": "b"}))
        await store.set_timer_handle("h1")
        await store.set_timer_handle("h2")
        state = PublishedState(token="b", expires_at=2, issuer="i", keyring="default")
        await store.set_published(state)
        assert (await store.get_token()).token == "b"
        assert await store.get_timer_handle() == "h2"
        assert await store.get_published() == state
