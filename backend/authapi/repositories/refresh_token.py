"""Refresh token repository backing the SQL revocation ledger."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from authapi.models.refresh_token import RefreshToken
from authapi.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only access to ``refresh_tokens`` rows, keyed by token hash."""

    model = RefreshToken

    def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def insert(self, *, subject: str, token_hash: str, expires_at: datetime) -> RefreshToken:
        """Stage a new, non-revoked record and flush it."""
        return self.add(
            RefreshToken(
                subject=subject,
                token_hash=token_hash,
                expires_at=expires_at,
                revoked=False,
            )
        )

    def mark_revoked(self, token_hash: str) -> int:
        """Flip ``revoked`` for one record.

        :returns: Rows changed (``0`` for unknown or already revoked tokens).
        """
        result = self.session.execute(
            update(RefreshToken)
            .where(RefreshToken.token_hash == token_hash, RefreshToken.revoked.is_(False))
            .values(revoked=True)
        )
        return int(result.rowcount or 0)

    def mark_all_revoked(self, subject: str) -> int:
        """Flip ``revoked`` for every live record owned by ``subject``."""
        result = self.session.execute(
            update(RefreshToken)
            .where(RefreshToken.subject == subject, RefreshToken.revoked.is_(False))
            .values(revoked=True)
        )
        return int(result.rowcount or 0)
