# comments in English; reST docstrings
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from authapi.services._shared.errors import StorageError
from authapi.services._shared.ports import (
    RevocationLedger,
    RevocationRecordView,
    as_utc,
    hash_token,
)

log = logging.getLogger(__name__)


@contextmanager
def _storage_errors(op: str) -> Iterator[None]:
    """Surface Redis failures (including socket timeouts) as :class:`StorageError`."""
    try:
        yield
    except RedisError as exc:
        log.error("ledger.redis_error", extra={"op": op}, exc_info=True)
        raise StorageError(f"revocation ledger unavailable ({op})") from exc


@dataclass(slots=True)
class RedisRevocationLedger(RevocationLedger):
    """
    Redis-backed revocation ledger.

    Layout: one hash per token (``rt:{sha256}``) with ``subject``,
    ``expires_at`` and ``revoked``; one set per subject (``rt:u:{subject}``)
    indexing the token hashes it owns. Keys carry no TTL: records are kept
    for audit and pruning is an external housekeeping job.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(digest: str) -> str:
        return f"rt:{digest}"

    @staticmethod
    def _ku(subject: str) -> str:
        return f"rt:u:{subject}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        return int(as_utc(dt).timestamp())

    @staticmethod
    def _b(value: bytes | str | None, default: str = "") -> str:
        if value is None:
            return default
        return value.decode() if isinstance(value, bytes | bytearray) else str(value)

    # -------------------- API ------------------------

    def record(self, subject: str, token: str, expires_at: datetime) -> None:
        digest = hash_token(token)
        key = self._k(digest)
        with _storage_errors("record"), self.r.pipeline() as pipe:
            # WATCH turns a concurrent write of the same key into WatchError.
            pipe.watch(key)
            if pipe.exists(key):
                pipe.unwatch()
                return
            pipe.multi()
            pipe.hset(
                key,
                mapping={
                    "subject": subject,
                    "expires_at": str(self._to_ts(expires_at)),
                    "revoked": "0",
                },
            )
            pipe.sadd(self._ku(subject), digest)
            pipe.execute()

    def revoke(self, token: str) -> None:
        key = self._k(hash_token(token))
        with _storage_errors("revoke"):
            # Unknown token: nothing to flip, and no partial hash is created.
            if not self.r.exists(key):
                return
            self.r.hset(key, "revoked", "1")

    def revoke_all(self, subject: str) -> None:
        with _storage_errors("revoke_all"):
            digests = [self._b(m) for m in self.r.smembers(self._ku(subject))]
            if not digests:
                return
            pipe = self.r.pipeline(transaction=True)
            for digest in digests:
                pipe.hset(self._k(digest), "revoked", "1")
            pipe.execute()

    def is_valid(self, token: str) -> bool:
        view = self.get(token)
        return view is not None and view.is_valid_at(datetime.now(UTC))

    def get(self, token: str) -> RevocationRecordView | None:
        """Fetch the record for ``token`` (if present)."""
        digest = hash_token(token)
        with _storage_errors("get"):
            h = self.r.hgetall(self._k(digest))
        if not h:
            return None
        fields = {self._b(k): self._b(v) for k, v in h.items()}
        return RevocationRecordView(
            token_hash=digest,
            subject=fields.get("subject", ""),
            expires_at=datetime.fromtimestamp(int(fields.get("expires_at", "0")), tz=UTC),
            revoked=fields.get("revoked", "0") == "1",
        )
