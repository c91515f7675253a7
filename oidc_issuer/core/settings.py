"""Application settings loaded from environment variables."""

from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from oidc_issuer.core.config import DEFAULT_KEYRING, IssuerConfig

EXPIRATION_MINUTES_DEFAULT = 120
JWKS_PAGE_SIZE_DEFAULT = 100


class DatabaseSettings(BaseSettings):
    """Connection settings for the issuer state database."""

    model_config = SettingsConfigDict(env_prefix="ISSUER_DB_")

    url: str = "sqlite+aiosqlite:///./issuer.db"
    echo: bool = False


class IssuerSettings(BaseSettings):
    """Token issuance and HTTP surface settings."""

    model_config = SettingsConfigDict(env_prefix="ISSUER_")

    app_url: str = "http://localhost:8000"
    expiration_minutes: int = EXPIRATION_MINUTES_DEFAULT
    audience: str | None = None
    additional_claims: dict[str, Any] | None = None
    keyring: str = DEFAULT_KEYRING
    internal_token: str = ""
    jwks_page_size: int = JWKS_PAGE_SIZE_DEFAULT
    log_level: str = "INFO"

    def to_config(self) -> IssuerConfig:
        """Extract the token-affecting configuration subset."""
        return IssuerConfig(
            expiration_minutes=self.expiration_minutes,
            audience=self.audience or None,
            additional_claims=self.additional_claims,
            keyring=self.keyring or DEFAULT_KEYRING,
        )
