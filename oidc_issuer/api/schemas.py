"""Pydantic schemas for the internal administration API."""

from typing import Any

from pydantic import BaseModel, ConfigDict

from oidc_issuer.core.config import DEFAULT_KEYRING, IssuerConfig
from oidc_issuer.rotation.types import SyncResult


def _to_camel(name: str) -> str:
    """Convert snake_case to camelCase for JSON serialization."""
    parts = name.split("_")
    return parts[0] + "".join(p.capitalize() for p in parts[1:])


class ConfigPayload(BaseModel):
    """Request body for PUT /internal/config."""

    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )

    expiration_minutes: int
    audience: str | None = None
    additional_claims: dict[str, Any] | None = None
    keyring: str = DEFAULT_KEYRING

    def to_config(self) -> IssuerConfig:
        return IssuerConfig(
            expiration_minutes=self.expiration_minutes,
            audience=self.audience or None,
            additional_claims=self.additional_claims,
            keyring=self.keyring or DEFAULT_KEYRING,
        )


class StatusEnvelope(BaseModel):
    """Wraps the latest reconciliation outcome: {result: ... | null}."""

    result: SyncResult | None = None
