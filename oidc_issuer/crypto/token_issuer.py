"""Signed token issuance and verification using RS256."""

import time
from typing import Any
from urllib.parse import urlsplit

import jwt
import uuid_utils
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from oidc_issuer.core.config import IssuerConfig
from oidc_issuer.core.errors import SigningError
from oidc_issuer.crypto.fingerprint import config_fingerprint
from oidc_issuer.crypto.types import SIGNING_ALGORITHM, TokenRecord

TOKEN_SUBJECT = "flows"
STANDARD_CLAIMS = ("sub", "aud", "exp", "iat", "iss", "jti", "nbf")

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _host(url: str) -> str:
    # IPv6 literals keep their brackets, as in a URL authority.
    host = urlsplit(url).hostname or ""
    return f"[{host}]" if ":" in host else host


def origin_of(url: str) -> str:
    """Scheme and authority of a URL, without default ports."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = _host(url)
    if parts.port is not None and parts.port != _DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}:{parts.port}"
    return f"{scheme}://{host}"


def hostname_of(url: str) -> str:
    """Host name of a URL, without scheme or port."""
    return _host(url)


def build_claims(config: IssuerConfig, issuer_url: str, now: int) -> dict[str, Any]:
    """Compose the token payload.

    Additional claims go first so that the standard claims written after
    them always win on a name clash.
    """
    expires_at = now + config.expiration_minutes * 60
    return {
        **(config.additional_claims or {}),
        "jti": str(uuid_utils.uuid4()),
        "iss": origin_of(issuer_url),
        "sub": TOKEN_SUBJECT,
        "aud": config.audience or hostname_of(issuer_url),
        "exp": expires_at,
        "iat": now,
        "nbf": now,
    }


def issue_token(
    config: IssuerConfig,
    issuer_url: str,
    kid: str,
    private_key: RSAPrivateKey,
    *,
    now: int | None = None,
) -> TokenRecord:
    """Sign a fresh token with the given key and describe it."""
    issued_at = int(time.time()) if now is None else now
    claims = build_claims(config, issuer_url, issued_at)
    try:
        token = jwt.encode(
            claims,
            private_key,
            algorithm=SIGNING_ALGORITHM,
            headers={"kid": kid, "typ": "JWT"},
        )
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise SigningError(f"Could not sign token with key {kid}") from exc
    return TokenRecord(
        token=token,
        expires_at=claims["exp"],
        config_fingerprint=config_fingerprint(config),
    )


def verify_token(
    token: str,
    public_jwk: dict[str, Any],
    *,
    issuer: str,
    audience: str,
) -> dict[str, Any]:
    """Verify a token against a published public JWK and return its claims."""
    key = jwt.PyJWK(public_jwk, algorithm=SIGNING_ALGORITHM)
    return jwt.decode(
        token,
        key.key,
        algorithms=[SIGNING_ALGORITHM],
        issuer=issuer,
        audience=audience,
        options={"require": list(STANDARD_CLAIMS)},
    )
