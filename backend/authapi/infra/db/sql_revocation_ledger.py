# comments in English; reST docstrings
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError

from authapi.services._shared.errors import StorageError
from authapi.services._shared.ports import (
    RevocationLedger,
    RevocationRecordView,
    as_utc,
    hash_token,
)
from authapi.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


@contextmanager
def _storage_errors(op: str) -> Iterator[None]:
    """Surface driver failures (including lock and connect timeouts) as :class:`StorageError`."""
    try:
        yield
    except SQLAlchemyError as exc:
        log.error("ledger.sql_error", extra={"op": op}, exc_info=True)
        raise StorageError(f"revocation ledger unavailable ({op})") from exc


@dataclass(slots=True)
class SQLRevocationLedger(RevocationLedger):
    """
    Relational revocation ledger over the ``refresh_tokens`` table.

    Every call runs in its own Unit of Work, so writes are committed before
    the method returns and nothing is cached between calls.
    """

    def record(self, subject: str, token: str, expires_at: datetime) -> None:
        with _storage_errors("record"), SQLAlchemyUnitOfWork() as uow:
            digest = hash_token(token)
            if uow.refresh_tokens.get_by_hash(digest) is not None:
                return
            uow.refresh_tokens.insert(
                subject=subject,
                token_hash=digest,
                expires_at=as_utc(expires_at),
            )

    def revoke(self, token: str) -> None:
        # Zero rows changed (unknown or already revoked) is not an error.
        with _storage_errors("revoke"), SQLAlchemyUnitOfWork() as uow:
            uow.refresh_tokens.mark_revoked(hash_token(token))

    def revoke_all(self, subject: str) -> None:
        with _storage_errors("revoke_all"), SQLAlchemyUnitOfWork() as uow:
            changed = uow.refresh_tokens.mark_all_revoked(subject)
        log.info("ledger.revoke_all", extra={"subject": subject, "count": changed})

    def is_valid(self, token: str) -> bool:
        view = self.get(token)
        return view is not None and view.is_valid_at(datetime.now(UTC))

    def get(self, token: str) -> RevocationRecordView | None:
        """Fetch the record for ``token`` (if present)."""
        digest = hash_token(token)
        with _storage_errors("get"), SQLAlchemyReadOnlyUnitOfWork() as uow:
            row = uow.refresh_tokens.get_by_hash(digest)
            if row is None:
                return None
            return RevocationRecordView(
                token_hash=row.token_hash,
                subject=row.subject,
                expires_at=as_utc(row.expires_at),
                revoked=bool(row.revoked),
            )
