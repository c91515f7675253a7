"""In-process store implementations."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from oidc_issuer.crypto.types import TokenRecord
from oidc_issuer.store.types import (
    KeyPage,
    KeyRecord,
    PublishedState,
    storage_key,
)

PAGE_SIZE_DEFAULT = 100


def utc_now() -> datetime:
    return datetime.now(UTC)


class InMemoryKeyStore:
    """Dictionary-backed key store; expired records are filtered on read."""

    def __init__(
        self,
        *,
        page_size: int = PAGE_SIZE_DEFAULT,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._records: dict[str, KeyRecord] = {}
        self._page_size = page_size
        self._clock = clock

    async def put(
        self, keyring: str, kid: str, public_jwk: dict[str, Any], ttl_seconds: int
    ) -> None:
        now = self._clock()
        record = KeyRecord(
            keyring=keyring,
            kid=kid,
            public_jwk=dict(public_jwk),
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
        self._records[storage_key(keyring, kid)] = record

    async def list(self, prefix: str, page_token: str | None = None) -> KeyPage:
        now = self._clock()
        live = sorted(
            (key, rec)
            for key, rec in self._records.items()
            if key.startswith(prefix) and rec.expires_at > now
        )
        if page_token is not None:
            live = [(key, rec) for key, rec in live if key > page_token]
        page = live[: self._page_size]
        next_token = page[-1][0] if len(live) > self._page_size else None
        return KeyPage(records=[rec for _, rec in page], next_page_token=next_token)


class InMemoryStateStore:
    """Holds the single-slot issuer records in process memory."""

    def __init__(self) -> None:
        self._token: TokenRecord | None = None
        self._timer_handle: str | None = None
        self._published: PublishedState | None = None

    async def get_token(self) -> TokenRecord | None:
        return self._token

    async def set_token(self, record: TokenRecord) -> None:
        self._token = record

    async def get_timer_handle(self) -> str | None:
        return self._timer_handle

    async def set_timer_handle(self, handle: str | None) -> None:
        self._timer_handle = handle

    async def get_published(self) -> PublishedState | None:
        return self._published

    async def set_published(self, state: PublishedState) -> None:
        self._published = state
