"""Type definitions for signing keys, JWKS, and issued tokens."""

from typing import Any

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from pydantic import BaseModel, ConfigDict

SIGNING_ALGORITHM = "RS256"
SIGNATURE_USE = "sig"


class SigningKey(BaseModel):
    """An RSA private key that signs exactly one token and is then dropped."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kid: str
    private_key: RSAPrivateKey


class JWKEntry(BaseModel):
    """Single JWK entry in a JWKS response."""

    kty: str = "RSA"
    use: str = SIGNATURE_USE
    alg: str = SIGNING_ALGORITHM
    kid: str
    n: str
    e: str

    def public_fields(self) -> dict[str, Any]:
        """The stored interchange form, without alg/use tags."""
        return self.model_dump(include={"kty", "kid", "n", "e"})


class JWKSResponse(BaseModel):
    """JSON Web Key Set response."""

    keys: list[JWKEntry]


class TokenRecord(BaseModel):
    """The current issued token and the configuration it was issued under."""

    model_config = ConfigDict(frozen=True)

    token: str
    expires_at: int
    config_fingerprint: str
