"""OpenID Connect Discovery document builder."""

from pydantic import BaseModel

from oidc_issuer.core.settings import IssuerSettings
from oidc_issuer.crypto.token_issuer import STANDARD_CLAIMS, origin_of
from oidc_issuer.crypto.types import SIGNING_ALGORITHM


class DiscoveryDocument(BaseModel):
    """OIDC .well-known/openid-configuration response.

    Only describes token validation: there are no authorization, token or
    userinfo endpoints to advertise.
    """

    issuer: str
    jwks_uri: str
    id_token_signing_alg_values_supported: list[str]
    subject_types_supported: list[str]
    response_types_supported: list[str]
    claims_supported: list[str]


def build_discovery(settings: IssuerSettings) -> DiscoveryDocument:
    """Build the discovery document from settings."""
    base_url = settings.app_url.rstrip("/")
    return DiscoveryDocument(
        issuer=origin_of(base_url),
        jwks_uri=f"{base_url}/jwks",
        id_token_signing_alg_values_supported=[SIGNING_ALGORITHM],
        subject_types_supported=["public"],
        response_types_supported=[],
        claims_supported=list(STANDARD_CLAIMS),
    )
