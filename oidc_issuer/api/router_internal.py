"""Internal endpoints for applying configuration and reading signals."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from starlette.responses import JSONResponse

from oidc_issuer.api.deps import get_engine, require_internal_token
from oidc_issuer.api.schemas import ConfigPayload, StatusEnvelope
from oidc_issuer.rotation.engine import IssuerEngine
from oidc_issuer.rotation.types import FailureReason, SyncResult
from oidc_issuer.store.types import PublishedState

router = APIRouter(prefix="/internal", tags=["internal"])

Engine = Annotated[IssuerEngine, Depends(get_engine)]
InternalToken = Annotated[str, Depends(require_internal_token)]


@router.get("/status")
async def sync_status(engine: Engine, _token: InternalToken) -> StatusEnvelope:
    """GET /internal/status -- outcome of the latest reconciliation."""
    return StatusEnvelope(result=engine.last_result)


@router.get("/signals")
async def published_signals(engine: Engine, _token: InternalToken) -> PublishedState:
    """GET /internal/signals -- token, expiry, issuer and active keyring."""
    published = await engine.state_store.get_published()
    if published is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return published


@router.put("/config", response_model=None)
async def apply_config(
    payload: ConfigPayload,
    engine: Engine,
    _token: InternalToken,
) -> SyncResult | JSONResponse:
    """PUT /internal/config -- reconcile against a new configuration."""
    result = await engine.apply(payload.to_config())
    if result.ready:
        return result
    code = (
        status.HTTP_422_UNPROCESSABLE_ENTITY
        if result.reason is FailureReason.INVALID_CONFIG
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return JSONResponse(result.model_dump(mode="json"), status_code=code)
