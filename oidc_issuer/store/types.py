"""Persisted record types shared by the store implementations."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

CURRENT_TOKEN_KEY = "current_token"
ROTATION_TIMER_KEY = "rotation_timer_id"
SIGNALS_KEY = "signals"


def key_prefix(keyring: str) -> str:
    """Storage key prefix for every public key under a keyring."""
    return f"key:{keyring}:"


def storage_key(keyring: str, kid: str) -> str:
    """Storage key of a single public key record."""
    return f"{key_prefix(keyring)}{kid}"


class KeyRecord(BaseModel):
    """A published public key; expires on its own and is never mutated."""

    model_config = ConfigDict(frozen=True)

    keyring: str
    kid: str
    public_jwk: dict[str, Any]
    created_at: datetime
    expires_at: datetime

    @property
    def storage_key(self) -> str:
        return storage_key(self.keyring, self.kid)


class KeyPage(BaseModel):
    """One page of live key records."""

    records: list[KeyRecord]
    next_page_token: str | None = None


class PublishedState(BaseModel):
    """Signals visible to consumers of the issuer."""

    model_config = ConfigDict(frozen=True)

    token: str
    expires_at: int
    issuer: str
    keyring: str
