"""Single-use RSA signing keys and their public JWK form."""

import base64

import uuid_utils
from cryptography.hazmat.primitives.asymmetric import rsa

from oidc_issuer.crypto.types import JWKEntry, SigningKey

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537


def generate_signing_key() -> SigningKey:
    """Generate an in-memory RSA-2048 key under a fresh time-ordered key id."""
    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=RSA_KEY_SIZE,
    )
    return SigningKey(kid=str(uuid_utils.uuid7()), private_key=private_key)


def _b64url_uint(value: int) -> str:
    length = max(1, (value.bit_length() + 7) // 8)
    return base64.urlsafe_b64encode(value.to_bytes(length, "big")).rstrip(b"=").decode()


def public_jwk_entry(key: SigningKey) -> JWKEntry:
    """Public half of a signing key as a JWK; the private numbers never leave."""
    numbers = key.private_key.public_key().public_numbers()
    return JWKEntry(kid=key.kid, n=_b64url_uint(numbers.n), e=_b64url_uint(numbers.e))
