from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol


class TokenKind(str, Enum):
    """Kind claim carried by every session token (``type`` in the JWT)."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified claims of a session token.

    :ivar subject: Opaque user identifier, always a string.
    :ivar kind: ``access`` or ``refresh``.
    :ivar issued_at: Issue instant (UTC).
    :ivar expires_at: Expiry instant (UTC).
    :ivar jti: Unique token identifier assigned at issuance.
    """

    subject: str
    kind: TokenKind
    issued_at: datetime
    expires_at: datetime
    jti: str


class TokenCodec(Protocol):
    """
    Port for minting and verifying signed session tokens.

    The codec is kind-agnostic: ``verify`` accepts both kinds and callers
    assert the kind they expect on the returned claims.
    """

    def issue(self, subject: str, kind: TokenKind, ttl: timedelta) -> str:
        """
        Return a signed token for ``subject`` expiring ``ttl`` from now.

        :raises ConfigError: If no signing secret is configured.
        """
        ...

    def verify(self, token: str) -> TokenClaims:
        """
        Check signature, algorithm, structure and expiry.

        :raises InvalidTokenError: On any verification failure.
        """
        ...
