"""FastAPI dependency injection for the engine and internal API authentication."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from oidc_issuer.core.settings import IssuerSettings
from oidc_issuer.rotation.engine import IssuerEngine

_security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> IssuerSettings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_engine(request: Request) -> IssuerEngine:
    """The deployment's engine, created by the application lifespan."""
    return request.app.state.engine


async def require_internal_token(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(_security)
    ],
    settings: Annotated[IssuerSettings, Depends(get_settings)],
) -> str:
    """Verify the ISSUER_INTERNAL_TOKEN Bearer token."""
    expected = settings.internal_token
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    if credentials is None or credentials.credentials != expected:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return credentials.credentials
