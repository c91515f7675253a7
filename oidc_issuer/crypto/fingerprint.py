"""Change detection for token-affecting configuration."""

import hashlib
import json

from oidc_issuer.core.config import IssuerConfig


def canonical_config(config: IssuerConfig) -> str:
    """Serialize the fingerprinted subset with stable key ordering."""
    subset = {
        "expirationMinutes": config.expiration_minutes,
        "audience": config.audience,
        "additionalClaims": config.additional_claims,
        "keyring": config.keyring,
    }
    return json.dumps(subset, sort_keys=True, separators=(",", ":"), default=str)


def config_fingerprint(config: IssuerConfig) -> str:
    """SHA-256 hex digest of the canonical configuration subset."""
    return hashlib.sha256(canonical_config(config).encode()).hexdigest()
