"""OIDC discovery and JWKS endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from oidc_issuer.api.deps import get_engine, get_settings
from oidc_issuer.core.settings import IssuerSettings
from oidc_issuer.crypto.types import JWKSResponse
from oidc_issuer.oidc.discovery import DiscoveryDocument, build_discovery
from oidc_issuer.oidc.jwks import collect_jwks
from oidc_issuer.rotation.engine import IssuerEngine

router = APIRouter()

DISCOVERY_CACHE_CONTROL = "public, max-age=3600"
JWKS_CACHE_CONTROL = "no-cache"


@router.get("/.well-known/openid-configuration")
async def openid_configuration(
    response: Response,
    settings: Annotated[IssuerSettings, Depends(get_settings)],
) -> DiscoveryDocument:
    """OpenID Connect Discovery 1.0."""
    response.headers["Cache-Control"] = DISCOVERY_CACHE_CONTROL
    return build_discovery(settings)


@router.get("/jwks")
async def jwks(
    response: Response,
    engine: Annotated[IssuerEngine, Depends(get_engine)],
) -> JWKSResponse:
    """JSON Web Key Set endpoint."""
    response.headers["Cache-Control"] = JWKS_CACHE_CONTROL
    return await collect_jwks(engine.key_store, engine.state_store)
