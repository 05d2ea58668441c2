"""
authapi.services._shared.ports
==============================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token handling, revocation state and the user store.

These ports decouple the service layer from concrete implementations
of token signing, refresh-token persistence and user persistence.

Modules
-------
- :mod:`token_codec`:
    Defines :class:`~.TokenCodec`, :class:`~.TokenKind` and
    :class:`~.TokenClaims`.

- :mod:`revocation_ledger`:
    Defines :class:`~.RevocationLedger`, :class:`~.RevocationRecordView` and
    the in-memory test double :class:`~.InMemoryRevocationLedger`.

- :mod:`user_store`:
    Defines :class:`~.UserStore`, the boundary of the user persistence layer.

Design Notes
------------
Concrete adapters (SQLAlchemy, Redis, Flask-JWT-Extended) live under
``authapi.infra`` and are selected in ``authapi.core.container``.
"""

from __future__ import annotations

from .revocation_ledger import (
    InMemoryRevocationLedger,
    RevocationLedger,
    RevocationRecordView,
    as_utc,
    hash_token,
)
from .token_codec import TokenClaims, TokenCodec, TokenKind
from .user_store import UserRecord, UserStore

__all__ = [
    "TokenCodec",
    "TokenKind",
    "TokenClaims",
    "RevocationLedger",
    "RevocationRecordView",
    "InMemoryRevocationLedger",
    "hash_token",
    "as_utc",
    "UserStore",
    "UserRecord",
]
