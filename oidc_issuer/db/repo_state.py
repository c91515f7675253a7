"""Database-backed single-slot issuer state."""

from typing import Any

from oidc_issuer.crypto.types import TokenRecord
from oidc_issuer.db.engine import SessionFactory, session_scope
from oidc_issuer.db.models import StateEntryEntity
from oidc_issuer.store.types import (
    CURRENT_TOKEN_KEY,
    ROTATION_TIMER_KEY,
    SIGNALS_KEY,
    PublishedState,
)


class SqlStateStore:
    """Keeps each record as one row of ``issuer_state``; writes are last-writer-wins."""

    def __init__(self, factory: SessionFactory) -> None:
        self._factory = factory

    async def _get(self, key: str) -> Any:
        async with session_scope(self._factory) as session:
            entity = await session.get(StateEntryEntity, key)
            return None if entity is None else entity.value

    async def _set(self, key: str, value: Any) -> None:
        async with session_scope(self._factory) as session:
            await session.merge(StateEntryEntity(key=key, value=value))

    async def get_token(self) -> TokenRecord | None:
        raw = await self._get(CURRENT_TOKEN_KEY)
        return None if raw is None else TokenRecord.model_validate(raw)

    async def set_token(self, record: TokenRecord) -> None:
        await self._set(CURRENT_TOKEN_KEY, record.model_dump())

    async def get_timer_handle(self) -> str | None:
        return await self._get(ROTATION_TIMER_KEY)

    async def set_timer_handle(self, handle: str | None) -> None:
        await self._set(ROTATION_TIMER_KEY, handle)

    async def get_published(self) -> PublishedState | None:
        raw = await self._get(SIGNALS_KEY)
        return None if raw is None else PublishedState.model_validate(raw)

    async def set_published(self, state: PublishedState) -> None:
        await self._set(SIGNALS_KEY, state.model_dump())
