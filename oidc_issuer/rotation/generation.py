"""One key generation step: fresh keypair, signed token, persisted public key."""

import asyncio
import logging
from typing import Any

from oidc_issuer.core.config import IssuerConfig
from oidc_issuer.core.errors import GenerationError, IssuerError
from oidc_issuer.crypto.keys import generate_signing_key, public_jwk_entry
from oidc_issuer.crypto.token_issuer import issue_token
from oidc_issuer.crypto.types import TokenRecord
from oidc_issuer.store.protocols import KeyStore, StateStore

logger = logging.getLogger(__name__)

# Public keys outlive the newest token signed with them by this margin.
KEY_GRACE_PERIOD_MINUTES = 30


def key_ttl_seconds(expiration_minutes: int) -> int:
    """Lifetime of a published key: grace period plus the longest token."""
    return (KEY_GRACE_PERIOD_MINUTES + expiration_minutes) * 60


def _sign_with_fresh_key(
    config: IssuerConfig, app_url: str
) -> tuple[str, dict[str, Any], TokenRecord]:
    """Generate a keypair, sign one token, and keep only the public half."""
    key = generate_signing_key()
    token = issue_token(config, app_url, key.kid, key.private_key)
    return key.kid, public_jwk_entry(key).public_fields(), token


async def generate_key_and_token(
    config: IssuerConfig,
    app_url: str,
    key_store: KeyStore,
    state_store: StateStore,
) -> TokenRecord:
    """Generate, sign, and persist the key before the token that needs it."""
    try:
        kid, public_jwk, token = await asyncio.to_thread(
            _sign_with_fresh_key, config, app_url
        )
        await key_store.put(
            config.keyring, kid, public_jwk, key_ttl_seconds(config.expiration_minutes)
        )
        await state_store.set_token(token)
    except IssuerError:
        raise
    except Exception as exc:
        raise GenerationError("Key and token generation failed") from exc
    logger.info("Generated key %s under keyring %r", kid, config.keyring)
    return token
