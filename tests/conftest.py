"""Shared test fixtures for the OIDC token issuer."""

from collections.abc import AsyncIterator, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from oidc_issuer.core.app import create_app
from oidc_issuer.core.config import IssuerConfig
from oidc_issuer.db.engine import SessionFactory, create_schema, create_session_factory
from oidc_issuer.rotation.engine import IssuerEngine
from oidc_issuer.rotation.timers import ManualScheduler
from oidc_issuer.store.memory import InMemoryKeyStore, InMemoryStateStore

APP_URL = "https://issuer.example.com/app"
INTERNAL_TOKEN = "test-internal-token"


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for test settings."""
    monkeypatch.setenv("ISSUER_APP_URL", APP_URL)
    monkeypatch.setenv("ISSUER_INTERNAL_TOKEN", INTERNAL_TOKEN)
    monkeypatch.setenv("ISSUER_DB_URL", "sqlite+aiosqlite://")


@pytest.fixture
async def session_factory() -> AsyncIterator[SessionFactory]:
    """In-memory SQLite shared by every session of one test."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await create_schema(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def config() -> IssuerConfig:
    return IssuerConfig(expiration_minutes=120, keyring="default")


@pytest.fixture
def key_store() -> InMemoryKeyStore:
    return InMemoryKeyStore()


@pytest.fixture
def state_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def engine(
    key_store: InMemoryKeyStore,
    state_store: InMemoryStateStore,
    scheduler: ManualScheduler,
) -> IssuerEngine:
    """Engine over in-memory stores with manually fired wakeups."""
    issuer_engine = IssuerEngine(
        app_url=APP_URL,
        key_store=key_store,
        state_store=state_store,
        scheduler=scheduler,
    )
    scheduler.bind(issuer_engine.on_wakeup)
    return issuer_engine


@pytest.fixture
def app(engine: IssuerEngine) -> FastAPI:
    """Application with the test engine installed in place of the lifespan."""
    application = create_app()
    application.state.engine = engine
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Create an httpx test client bound to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def client_for() -> Callable[[FastAPI], AsyncClient]:
    """Build an httpx client for an application created inside a test."""

    def _make(application: FastAPI) -> AsyncClient:
        transport = ASGITransport(app=application)
        return AsyncClient(transport=transport, base_url="http://test")

    return _make
