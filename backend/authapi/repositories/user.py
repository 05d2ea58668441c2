"""User repository: lookups and password-hash writes."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select, update

from authapi.models.user import User
from authapi.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Implements the ``UserStore`` boundary consumed by the identity service.
    It NEVER handles tokens or sessions, only DB-level user management.
    """

    model = User

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by exact (trimmed) username."""
        stmt = select(User).where(User.username == username.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def find_by_identifier(self, value: str) -> User | None:
        """Resolve a login identifier: email first, then username.

        :param value: Email address or username supplied by the client.
        :type value: str
        :returns: Matching user or ``None``.
        :rtype: User | None
        """
        return self.get_by_email(value) or self.get_by_username(value)

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def exists_by_username(self, username: str) -> bool:
        stmt = select(User.id).where(User.username == username.strip())
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Password ops ----------------------------

    def update_password_hash(self, user_id: int, password_hash: str) -> None:
        """Overwrite a user's password hash.

        :param user_id: Identifier of the user.
        :type user_id: int
        :param password_hash: Already-hashed password.
        :type password_hash: str
        :raises ValueError: If the user does not exist.
        """
        result = self.session.execute(
            update(User).where(User.id == user_id).values(password_hash=password_hash)
        )
        if result.rowcount == 0:
            raise ValueError(f"User {user_id} not found.")
