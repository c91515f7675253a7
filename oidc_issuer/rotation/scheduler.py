"""Self-rescheduling key rotation with fixed-delay retry."""

import logging
from collections.abc import Awaitable, Callable

from oidc_issuer.core.config import IssuerConfig
from oidc_issuer.core.errors import GenerationError
from oidc_issuer.crypto.fingerprint import config_fingerprint
from oidc_issuer.crypto.types import TokenRecord
from oidc_issuer.rotation.generation import generate_key_and_token
from oidc_issuer.rotation.timers import Scheduler
from oidc_issuer.rotation.types import SyncResult
from oidc_issuer.store.protocols import KeyStore, StateStore

logger = logging.getLogger(__name__)

MIN_ROTATION_INTERVAL_MINUTES = 5
ROTATION_RETRY_SECONDS = 300

Reconcile = Callable[[IssuerConfig], Awaitable[SyncResult]]


def rotation_interval_minutes(expiration_minutes: int) -> int:
    """Rotate at half the token lifetime, never more often than every 5 minutes."""
    return max(MIN_ROTATION_INTERVAL_MINUTES, expiration_minutes // 2)


def rotation_due_at(token: TokenRecord, expiration_minutes: int) -> int:
    """Epoch second at which the token's scheduled rotation falls due."""
    issued_at = token.expires_at - expiration_minutes * 60
    return issued_at + rotation_interval_minutes(expiration_minutes) * 60


class RotationScheduler:
    """Owns the single persisted rotation wakeup of a deployment."""

    def __init__(
        self,
        scheduler: Scheduler,
        key_store: KeyStore,
        state_store: StateStore,
        app_url: str,
    ) -> None:
        self._scheduler = scheduler
        self._key_store = key_store
        self._state_store = state_store
        self._app_url = app_url

    async def arm(self, delay_seconds: int, description: str) -> str:
        """Cancel the persisted wakeup, if any, then arm and persist a new one."""
        previous = await self._state_store.get_timer_handle()
        if previous is not None:
            await self._scheduler.unset(previous)
        handle = await self._scheduler.set(delay_seconds, description)
        await self._state_store.set_timer_handle(handle)
        return handle

    async def arm_rotation(self, expiration_minutes: int, reason: str) -> str:
        interval = rotation_interval_minutes(expiration_minutes)
        logger.info("Next key rotation in %d minutes (%s)", interval, reason)
        return await self.arm(
            interval * 60, f"Key rotation {reason} ({interval} minutes)"
        )

    async def arm_retry(self) -> str:
        logger.info("Retrying key rotation in %d seconds", ROTATION_RETRY_SECONDS)
        return await self.arm(
            ROTATION_RETRY_SECONDS, "Key rotation retry after failure (5 minutes)"
        )

    async def ensure_armed(
        self, token: TokenRecord, expiration_minutes: int, now: int
    ) -> str | None:
        """Arm a rotation unless the persisted wakeup is still pending.

        The resumed wakeup keeps the schedule of the current token instead of
        starting a full interval from now.
        """
        handle = await self._state_store.get_timer_handle()
        if handle is not None and await self._scheduler.is_pending(handle):
            return None
        delay = max(0, rotation_due_at(token, expiration_minutes) - now)
        logger.info("Resuming key rotation in %d seconds", delay)
        return await self.arm(delay, f"Key rotation resumed ({delay} seconds)")

    async def rotate(
        self, handle: str, config: IssuerConfig | None, reconcile: Reconcile
    ) -> bool:
        """Handle a wakeup; returns True when new key material was published.

        Only the wakeup matching the persisted handle rotates. Any other one
        was cancelled after it started firing and is dropped without
        re-arming.
        """
        current = await self._state_store.get_timer_handle()
        if handle != current:
            logger.info("Ignoring cancelled rotation wakeup %s", handle)
            return False
        if config is None:
            logger.warning("Rotation wakeup %s before any configuration", handle)
            return False

        fingerprint = config_fingerprint(config)
        logger.info("Timer-triggered key rotation for configuration %s", fingerprint)
        try:
            await generate_key_and_token(
                config, self._app_url, self._key_store, self._state_store
            )
            result = await reconcile(config)
            if not result.ready:
                raise GenerationError(
                    f"Reconciliation after rotation failed: {result.description}"
                )
            await self.arm_rotation(config.expiration_minutes, "after rotation")
        except Exception:
            logger.exception("Key rotation failed for configuration %s", fingerprint)
            await self.arm_retry()
            return False
        return True
