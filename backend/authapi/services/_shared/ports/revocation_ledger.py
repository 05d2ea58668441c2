from __future__ import annotations

import hashlib
import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol


def hash_token(token: str) -> str:
    """Return the stable SHA-256 hex digest under which a token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def as_utc(dt: datetime) -> datetime:
    """Label naive datetimes as UTC; convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class RevocationRecordView:
    """
    Read-model for a refresh token record.

    :ivar token_hash: SHA-256 digest of the refresh token.
    :ivar subject: Owning subject identifier.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar revoked: Monotonic revoked flag (false -> true only).
    """

    token_hash: str
    subject: str
    expires_at: datetime
    revoked: bool

    def is_valid_at(self, now: datetime) -> bool:
        return not self.revoked and as_utc(now) < as_utc(self.expires_at)


class RevocationLedger(Protocol):
    """
    Durable record of issued refresh tokens.

    Every method is a blocking call on shared storage and may fail with
    :class:`~authapi.services._shared.errors.StorageError`. Implementations
    must not cache revocation state in process.
    """

    def record(self, subject: str, token: str, expires_at: datetime) -> None:
        """
        Persist a freshly issued refresh token.

        A token already on record is left untouched, so a revoked record
        can never become valid again.
        """
        ...

    def revoke(self, token: str) -> None:
        """Mark a token revoked. Unknown or already revoked tokens are a no-op."""
        ...

    def revoke_all(self, subject: str) -> None:
        """Mark every non-revoked record owned by ``subject`` as revoked."""
        ...

    def is_valid(self, token: str) -> bool:
        """
        Return ``True`` iff a record exists, is not revoked and not expired.

        Unknown tokens are reported as not valid, never as an error.
        """
        ...


class InMemoryRevocationLedger(RevocationLedger):
    """
    In-memory ledger used as a test double.

    .. note::
       Uses a threading lock so concurrent tests see consistent records.
    """

    def __init__(self) -> None:
        self._by_hash: dict[str, RevocationRecordView] = {}
        self._by_subject: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def record(self, subject: str, token: str, expires_at: datetime) -> None:
        digest = hash_token(token)
        with self._lock:
            if digest in self._by_hash:
                return
            self._by_hash[digest] = RevocationRecordView(
                token_hash=digest,
                subject=subject,
                expires_at=as_utc(expires_at),
                revoked=False,
            )
            self._by_subject.setdefault(subject, set()).add(digest)

    def revoke(self, token: str) -> None:
        digest = hash_token(token)
        with self._lock:
            rec = self._by_hash.get(digest)
            if rec is not None and not rec.revoked:
                self._by_hash[digest] = replace(rec, revoked=True)

    def revoke_all(self, subject: str) -> None:
        with self._lock:
            for digest in self._by_subject.get(subject, set()):
                rec = self._by_hash[digest]
                if not rec.revoked:
                    self._by_hash[digest] = replace(rec, revoked=True)

    def is_valid(self, token: str) -> bool:
        rec = self.get(token)
        return rec is not None and rec.is_valid_at(datetime.now(UTC))

    def get(self, token: str) -> RevocationRecordView | None:
        """Fetch the record for ``token`` (tests and diagnostics)."""
        with self._lock:
            return self._by_hash.get(hash_token(token))
