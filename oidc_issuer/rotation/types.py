"""Outcome types of reconciliation passes."""

from enum import StrEnum

from pydantic import BaseModel

from oidc_issuer.store.types import PublishedState


class SyncStatus(StrEnum):
    READY = "ready"
    FAILED = "failed"


class SyncAction(StrEnum):
    BOOTSTRAP = "bootstrap"
    REGENERATE = "regenerate"
    REUSE = "reuse"


class FailureReason(StrEnum):
    INVALID_CONFIG = "invalid_config"
    SYNC_ERROR = "sync_error"


class SyncResult(BaseModel):
    """Terminal state of a reconciliation pass."""

    status: SyncStatus
    description: str | None = None
    reason: FailureReason | None = None
    action: SyncAction | None = None
    published: PublishedState | None = None

    @classmethod
    def failed(cls, reason: FailureReason, description: str) -> "SyncResult":
        return cls(status=SyncStatus.FAILED, reason=reason, description=description)

    @property
    def ready(self) -> bool:
        return self.status is SyncStatus.READY
