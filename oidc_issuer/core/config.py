"""Token-affecting issuer configuration."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_KEYRING = "default"
MIN_EXPIRATION_MINUTES = 10


class IssuerConfig(BaseModel):
    """Configuration applied by a single reconciliation pass."""

    model_config = ConfigDict(frozen=True)

    expiration_minutes: int
    audience: str | None = None
    additional_claims: dict[str, Any] | None = None
    keyring: str = Field(default=DEFAULT_KEYRING, min_length=1)
