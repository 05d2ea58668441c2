"""Refresh token ledger rows (one per issued refresh token)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, false, func
from sqlalchemy.orm import Mapped, mapped_column

from authapi.core.extensions import db

from .base import PKMixin, ReprMixin


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    Persisted revocation record for an issued refresh token.

    Only the SHA-256 digest of the token is stored. ``revoked`` flips from
    false to true exactly once; rows are never deleted by the service.

    Fields
    ------
    subject : str
        Owning subject, stored as the opaque string carried by the token.
        No foreign key: the ledger does not depend on how subjects are
        allocated.
    token_hash : str
        Hex digest of the refresh token, unique.
    expires_at : datetime
        Expiry copied from the verified token (UTC).
    revoked : bool
        Revocation flag.
    created_at : datetime
        Insert timestamp.
    """

    __tablename__ = "refresh_tokens"
    __repr_fields__ = ("subject", "revoked")

    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("ix_refresh_tokens_subject_revoked", "subject", "revoked"),)
