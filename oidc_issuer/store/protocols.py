"""Interfaces of the shared state the rotation engine depends on."""

from typing import Any, Protocol

from oidc_issuer.crypto.types import TokenRecord
from oidc_issuer.store.types import KeyPage, PublishedState


class KeyStore(Protocol):
    """TTL-expiring public keys, addressed by keyring and key id."""

    async def put(
        self, keyring: str, kid: str, public_jwk: dict[str, Any], ttl_seconds: int
    ) -> None: ...

    async def list(self, prefix: str, page_token: str | None = None) -> KeyPage: ...


class StateStore(Protocol):
    """Single-slot records: current token, rotation timer handle, signals."""

    async def get_token(self) -> TokenRecord | None: ...

    async def set_token(self, record: TokenRecord) -> None: ...

    async def get_timer_handle(self) -> str | None: ...

    async def set_timer_handle(self, handle: str | None) -> None: ...

    async def get_published(self) -> PublishedState | None: ...

    async def set_published(self, state: PublishedState) -> None: ...
