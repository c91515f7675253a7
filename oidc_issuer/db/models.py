"""SQLAlchemy models for published keys and single-slot issuer state."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from oidc_issuer.db.base import BaseEntity


class IssuedPublicKeyEntity(BaseEntity):
    """Public half of a signing key, published until it expires."""

    __tablename__ = "issued_public_keys"

    storage_key: Mapped[str] = mapped_column(String(320), primary_key=True)
    keyring: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    kid: Mapped[str] = mapped_column(String(50), nullable=False)
    public_jwk: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )


class StateEntryEntity(BaseEntity):
    """A named JSON value: current token, timer handle, or signals."""

    __tablename__ = "issuer_state"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
