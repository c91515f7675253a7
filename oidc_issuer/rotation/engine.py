"""Per-deployment entry points: configuration applies and rotation wakeups."""

import asyncio
import time
from collections.abc import Callable

from oidc_issuer.core.config import IssuerConfig
from oidc_issuer.rotation.scheduler import RotationScheduler
from oidc_issuer.rotation.sync import SyncStateMachine
from oidc_issuer.rotation.timers import Scheduler
from oidc_issuer.rotation.types import SyncResult
from oidc_issuer.store.protocols import KeyStore, StateStore


class IssuerEngine:
    """Serializes reconciliation and rotation for one deployment.

    Both entry points read, decide and write the token record and the timer
    handle; the lock makes each of those sequences a single writer.
    """

    def __init__(
        self,
        *,
        app_url: str,
        key_store: KeyStore,
        state_store: StateStore,
        scheduler: Scheduler,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.key_store = key_store
        self.state_store = state_store
        self.rotation = RotationScheduler(scheduler, key_store, state_store, app_url)
        self.sync = SyncStateMachine(
            key_store, state_store, self.rotation, app_url, clock=clock
        )
        self._lock = asyncio.Lock()
        self._config: IssuerConfig | None = None
        self._last_result: SyncResult | None = None

    @property
    def config(self) -> IssuerConfig | None:
        """The last configuration that reconciled successfully."""
        return self._config

    @property
    def last_result(self) -> SyncResult | None:
        return self._last_result

    async def apply(self, config: IssuerConfig) -> SyncResult:
        """Reconcile against a newly applied configuration."""
        async with self._lock:
            result = await self.sync.run(config)
            if result.ready:
                self._config = config
            self._last_result = result
        return result

    async def on_wakeup(self, handle: str) -> None:
        async with self._lock:
            await self.rotation.rotate(
                handle, self._config, self._reconcile_after_rotation
            )

    async def _reconcile_after_rotation(self, config: IssuerConfig) -> SyncResult:
        result = await self.sync.run(config, resume_rotation=False)
        self._last_result = result
        return result
