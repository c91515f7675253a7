"""Tests for keyring publication ordering and serialized entry points."""

import asyncio
from typing import Any

from oidc_issuer.core.config import IssuerConfig
from oidc_issuer.crypto.types import JWKSResponse
from oidc_issuer.oidc.jwks import collect_jwks
from oidc_issuer.rotation.engine import IssuerEngine
from oidc_issuer.rotation.timers import ManualScheduler
from oidc_issuer.store.memory import InMemoryKeyStore, InMemoryStateStore
from oidc_issuer.store.types import key_prefix

APP_URL = "https://issuer.example.com/app"


class ObservingKeyStore(InMemoryKeyStore):
    """Captures what a verifier would be served around every key write."""

    def __init__(self, state_store: InMemoryStateStore) -> None:
        super().__init__()
        self._state_store = state_store
        self.observed: list[JWKSResponse] = []

    async def put(
        self, keyring: str, kid: str, public_jwk: dict[str, Any], ttl_seconds: int
    ) -> None:
        self.observed.append(await collect_jwks(self, self._state_store))
        await super().put(keyring, kid, public_jwk, ttl_seconds)
        self.observed.append(await collect_jwks(self, self._state_store))


def _kids(jwks: JWKSResponse) -> list[str]:
    return [k.kid for k in jwks.keys]


class TestKeyringPublication:
    """Verifiers never see a keyring before its keys are stored."""

    async def test_empty_before_first_publication(
        self, key_store: InMemoryKeyStore, state_store: InMemoryStateStore
    ) -> None:
        jwk = {"kty": "RSA", "kid": "k1", "n": "a", "e": "b"}
        await key_store.put("default", "k1", jwk, 60)
        assert (await collect_jwks(key_store, state_store)).keys == []

    async def test_switch_is_observed_atomically(
        self, state_store: InMemoryStateStore, scheduler: ManualScheduler
    ) -> None:
        key_store = ObservingKeyStore(state_store)
        engine = IssuerEngine(
            app_url=APP_URL,
            key_store=key_store,
            state_store=state_store,
            scheduler=scheduler,
        )
        config = IssuerConfig(expiration_minutes=60)
        await engine.apply(config)
        default_kids = _kids(await collect_jwks(key_store, state_store))
        assert len(default_kids) == 1
        key_store.observed.clear()

        await engine.apply(config.model_copy(update={"keyring": "v2"}))

        assert [_kids(seen) for seen in key_store.observed] == [
            default_kids,
            default_kids,
        ]
        v2_kids = [r.kid for r in (await key_store.list(key_prefix("v2"))).records]
        assert _kids(await collect_jwks(key_store, state_store)) == v2_kids
        assert (await state_store.get_published()).keyring == "v2"

    async def test_jwks_entries_are_tagged(
        self,
        engine: IssuerEngine,
        config: IssuerConfig,
        key_store: InMemoryKeyStore,
        state_store: InMemoryStateStore,
    ) -> None:
        await engine.apply(config)
        (entry,) = (await collect_jwks(key_store, state_store)).keys
        assert entry.alg == "RS256"
        assert entry.use == "sig"
        assert entry.kty == "RSA"


class TestSerialization:
    """Concurrent reconciliation and rotation leave one wakeup armed."""

    async def test_concurrent_apply_and_wakeup(
        self,
        engine: IssuerEngine,
        config: IssuerConfig,
        state_store: InMemoryStateStore,
        scheduler: ManualScheduler,
    ) -> None:
        await engine.apply(config)
        (handle,) = scheduler.pending

        await asyncio.gather(
            engine.apply(config.model_copy(update={"keyring": "v2"})),
            scheduler.fire(handle),
        )

        assert len(scheduler.pending) == 1
        assert await state_store.get_timer_handle() in scheduler.pending
        published = await state_store.get_published()
        token = await state_store.get_token()
        assert published.keyring == "v2"
        assert published.token == token.token

    async def test_concurrent_applies(
        self,
        engine: IssuerEngine,
        config: IssuerConfig,
        state_store: InMemoryStateStore,
        scheduler: ManualScheduler,
    ) -> None:
        results = await asyncio.gather(
            *(
                engine.apply(config.model_copy(update={"audience": f"aud-{i}"}))
                for i in range(4)
            )
        )
        assert all(r.ready for r in results)
        assert len(scheduler.pending) == 1
        assert await state_store.get_timer_handle() in scheduler.pending
        assert engine.config.audience == "aud-3"
