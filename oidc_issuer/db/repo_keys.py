"""Database-backed key store with TTL expiry and keyset pagination."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import delete, select

from oidc_issuer.db.engine import SessionFactory, session_scope
from oidc_issuer.db.models import IssuedPublicKeyEntity
from oidc_issuer.store.memory import PAGE_SIZE_DEFAULT, utc_now
from oidc_issuer.store.types import KeyPage, KeyRecord, storage_key


def _as_utc(value: datetime) -> datetime:
    """SQLite returns naive datetimes; every stored value is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_record(entity: IssuedPublicKeyEntity) -> KeyRecord:
    return KeyRecord(
        keyring=entity.keyring,
        kid=entity.kid,
        public_jwk=entity.public_jwk,
        created_at=_as_utc(entity.created_at),
        expires_at=_as_utc(entity.expires_at),
    )


class SqlKeyStore:
    """Stores public keys in ``issued_public_keys``.

    Expired rows are excluded by every read and purged lazily on write, so
    no explicit delete operation is exposed.
    """

    def __init__(
        self,
        factory: SessionFactory,
        *,
        page_size: int = PAGE_SIZE_DEFAULT,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._factory = factory
        self._page_size = page_size
        self._clock = clock

    async def put(
        self, keyring: str, kid: str, public_jwk: dict[str, Any], ttl_seconds: int
    ) -> None:
        now = self._clock()
        async with session_scope(self._factory) as session:
            await session.execute(
                delete(IssuedPublicKeyEntity).where(
                    IssuedPublicKeyEntity.expires_at <= now
                )
            )
            session.add(
                IssuedPublicKeyEntity(
                    storage_key=storage_key(keyring, kid),
                    keyring=keyring,
                    kid=kid,
                    public_jwk=dict(public_jwk),
                    created_at=now,
                    expires_at=now + timedelta(seconds=ttl_seconds),
                )
            )

    async def list(self, prefix: str, page_token: str | None = None) -> KeyPage:
        stmt = (
            select(IssuedPublicKeyEntity)
            .where(
                IssuedPublicKeyEntity.storage_key.startswith(prefix, autoescape=True),
                IssuedPublicKeyEntity.expires_at > self._clock(),
            )
            .order_by(IssuedPublicKeyEntity.storage_key)
            .limit(self._page_size + 1)
        )
        if page_token is not None:
            stmt = stmt.where(IssuedPublicKeyEntity.storage_key > page_token)
        async with session_scope(self._factory) as session:
            result = await session.execute(stmt)
            entities = result.scalars().all()
        page = entities[: self._page_size]
        next_token = page[-1].storage_key if len(entities) > self._page_size else None
        records = [_to_record(e) for e in page]
        return KeyPage(records=records, next_page_token=next_token)
