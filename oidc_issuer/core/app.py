"""FastAPI application factory for the OIDC token issuer."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from oidc_issuer.api.router_internal import router as internal_router
from oidc_issuer.core.logging import configure_logging
from oidc_issuer.core.settings import DatabaseSettings, IssuerSettings
from oidc_issuer.db.engine import create_engine, create_schema, create_session_factory
from oidc_issuer.db.repo_keys import SqlKeyStore
from oidc_issuer.db.repo_state import SqlStateStore
from oidc_issuer.oidc.routes_discovery import router as discovery_router
from oidc_issuer.rotation.engine import IssuerEngine
from oidc_issuer.rotation.timers import AsyncioScheduler

logger = logging.getLogger(__name__)


def create_app(
    settings: IssuerSettings | None = None,
    db_settings: DatabaseSettings | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application."""
    settings = settings or IssuerSettings()
    db_settings = db_settings or DatabaseSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        db_engine = create_engine(db_settings)
        await create_schema(db_engine)
        factory = create_session_factory(db_engine)

        scheduler = AsyncioScheduler()
        engine = IssuerEngine(
            app_url=settings.app_url,
            key_store=SqlKeyStore(factory, page_size=settings.jwks_page_size),
            state_store=SqlStateStore(factory),
            scheduler=scheduler,
        )
        scheduler.bind(engine.on_wakeup)
        app.state.engine = engine

        result = await engine.apply(settings.to_config())
        if not result.ready:
            logger.error("Startup sync failed: %s", result.description)
        try:
            yield
        finally:
            await scheduler.close()
            await db_engine.dispose()

    app = FastAPI(
        title="OIDC Token Issuer",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.include_router(discovery_router)
    app.include_router(internal_router)
    return app
