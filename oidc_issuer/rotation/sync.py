"""Reconciliation of persisted issuer state with the applied configuration."""

import logging
import time
from collections.abc import Callable

from oidc_issuer.core.config import MIN_EXPIRATION_MINUTES, IssuerConfig
from oidc_issuer.crypto.fingerprint import config_fingerprint
from oidc_issuer.crypto.token_issuer import origin_of
from oidc_issuer.crypto.types import TokenRecord
from oidc_issuer.rotation.generation import generate_key_and_token
from oidc_issuer.rotation.scheduler import RotationScheduler, rotation_due_at
from oidc_issuer.rotation.types import (
    FailureReason,
    SyncAction,
    SyncResult,
    SyncStatus,
)
from oidc_issuer.store.protocols import KeyStore, StateStore
from oidc_issuer.store.types import PublishedState

logger = logging.getLogger(__name__)

EXPIRATION_TOO_SHORT = (
    f"Token expiration time must be at least {MIN_EXPIRATION_MINUTES} minutes"
)
SYNC_ERROR = "Sync error, see logs"


class SyncStateMachine:
    """Decides between bootstrap, regenerate and reuse, then publishes.

    This is the only writer of the published signals. The active keyring is
    set to the configured one only right after keys were generated for it;
    a pass that generates nothing keeps the previously published keyring.
    """

    def __init__(
        self,
        key_store: KeyStore,
        state_store: StateStore,
        rotation: RotationScheduler,
        app_url: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._key_store = key_store
        self._state_store = state_store
        self._rotation = rotation
        self._app_url = app_url
        self._clock = clock

    async def run(
        self, config: IssuerConfig, *, resume_rotation: bool = True
    ) -> SyncResult:
        if config.expiration_minutes < MIN_EXPIRATION_MINUTES:
            logger.warning(
                "Rejected configuration: expiration of %d minutes",
                config.expiration_minutes,
            )
            return SyncResult.failed(FailureReason.INVALID_CONFIG, EXPIRATION_TOO_SHORT)

        fingerprint = config_fingerprint(config)
        phase = "load"
        try:
            current = await self._state_store.get_token()
            now = int(self._clock())
            if current is None:
                phase = SyncAction.BOOTSTRAP
                logger.info("No current token, generating initial key and token")
                token = await self._generate(config)
                await self._rotation.arm_rotation(config.expiration_minutes, "initial")
                keyring = config.keyring
            elif current.config_fingerprint != fingerprint:
                phase = SyncAction.REGENERATE
                logger.info("Configuration changed, regenerating key and token")
                token = await self._generate(config)
                await self._rotation.arm_rotation(
                    config.expiration_minutes, "rescheduled after config change"
                )
                keyring = config.keyring
            elif now >= rotation_due_at(current, config.expiration_minutes):
                # Missed rotation, e.g. the process was down when it was due.
                phase = SyncAction.REGENERATE
                logger.info("Current token is past its rotation point, regenerating")
                token = await self._generate(config)
                await self._rotation.arm_rotation(
                    config.expiration_minutes, "rescheduled after missed rotation"
                )
                keyring = config.keyring
            else:
                phase = SyncAction.REUSE
                token = current
                previous = await self._state_store.get_published()
                keyring = previous.keyring if previous is not None else config.keyring
                if resume_rotation:
                    await self._rotation.ensure_armed(
                        token, config.expiration_minutes, now
                    )

            published = PublishedState(
                token=token.token,
                expires_at=token.expires_at,
                issuer=origin_of(self._app_url),
                keyring=keyring,
            )
            await self._state_store.set_published(published)
        except Exception:
            logger.exception(
                "Sync failed during %s for configuration %s", phase, fingerprint
            )
            return SyncResult.failed(FailureReason.SYNC_ERROR, SYNC_ERROR)

        logger.info("Sync %s complete, active keyring %r", phase, keyring)
        return SyncResult(
            status=SyncStatus.READY, action=SyncAction(phase), published=published
        )

    async def _generate(self, config: IssuerConfig) -> TokenRecord:
        return await generate_key_and_token(
            config, self._app_url, self._key_store, self._state_store
        )
