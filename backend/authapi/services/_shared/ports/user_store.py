from __future__ import annotations

from datetime import datetime
from typing import Protocol


class UserRecord(Protocol):
    """Attributes the identity flow reads from a stored user."""

    id: int
    username: str
    email: str
    password_hash: str
    created_at: datetime

    def verify_password(self, raw: str) -> bool: ...


class UserStore(Protocol):
    """
    Boundary of the durable user store consumed by the identity service.

    ``find_by_identifier`` returns ``None`` for unknown identifiers (the
    "not found" outcome). Password hashing stays on the store side.
    """

    def find_by_identifier(self, value: str) -> UserRecord | None: ...

    def update_password_hash(self, user_id: int, password_hash: str) -> None: ...
