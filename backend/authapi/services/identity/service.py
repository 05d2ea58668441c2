"""
IdentityService
===============

Aggregate service responsible for the `User` aggregate on the session paths:
- Registration (then token issuance)
- Credential check on login (then token issuance)
- Profile lookup for the authenticated subject
- Password change (then revocation of every refresh token)

Token handling is delegated to :class:`SessionManager`; this service never
touches the codec or the ledger directly.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash

from authapi.models.user import User
from authapi.services._shared.base import BaseService, ServiceContext
from authapi.services._shared.errors import (
    ConflictError,
    NotFoundError,
    PartialFailureError,
    ServiceError,
    StorageError,
    UnauthorizedError,
)
from authapi.services._shared.ports import UserRecord, UserStore
from authapi.services.identity.dto import (
    AuthResultOut,
    LoginIn,
    PasswordChangeIn,
    RegisterIn,
    UserPublicOut,
)
from authapi.services.sessions.service import SessionManager

log = logging.getLogger(__name__)


def violates(exc: IntegrityError, *markers: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name, SQLite the ``table.column`` pair,
    so callers pass both.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param markers: Constraint names or ``table.column`` strings to match.
    :returns: True if any marker appears in the driver message.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return any(m.lower() in message for m in markers)


class IdentityService(BaseService):
    """
    Application service for the `User` aggregate.

    Responsibilities
    ----------------
    - Register users ensuring email and username uniqueness.
    - Authenticate credentials.
    - Retrieve the authenticated user's profile.
    - Manage the password lifecycle and its session side effects.
    """

    def __init__(self, *, sessions: SessionManager, ctx: ServiceContext | None = None) -> None:
        super().__init__(ctx=ctx)
        self.sessions = sessions

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Register a new user and issue their first token pair.

        :param dto: User registration input DTO.
        :type dto: RegisterIn
        :returns: Public user plus token pair.
        :rtype: AuthResultOut
        :raises ConflictError: When email or username is taken.
        """

        with self.rw_uow() as uow:
            repo = uow.users

            if repo.exists_by_email(dto.email):
                raise ConflictError("User", "email already in use")
            if repo.exists_by_username(dto.username):
                raise ConflictError("User", "username already in use")

            try:
                user = User(
                    username=dto.username,
                    email=dto.email,
                    password=dto.password,  # model hashes via setter
                )
                repo.add(user)
            except ValueError as exc:
                raise ServiceError(str(exc)) from exc
            except IntegrityError as exc:
                if violates(exc, "uq_users_email", "users.email"):
                    raise ConflictError("User", "email already in use") from exc
                if violates(exc, "uq_users_username", "users.username"):
                    raise ConflictError("User", "username already in use") from exc
                raise  # unknown integrity error -> bubble up

            user_out = self._to_public(user)

        # The user row is committed before any token references it.
        tokens = self.sessions.issue_pair(str(user_out.id))
        log.info("identity.registered", extra={"subject": str(user_out.id)})
        return AuthResultOut(user=user_out, tokens=tokens)

    # --------------------------------------------------------------------- #
    # Authentication
    # --------------------------------------------------------------------- #

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Authenticate by email or username and issue a token pair.

        :param dto: Authentication input DTO.
        :type dto: LoginIn
        :returns: Public user plus token pair.
        :rtype: AuthResultOut
        :raises UnauthorizedError: When credentials are invalid.
        """

        with self.ro_uow() as uow:
            store: UserStore = uow.users
            user = store.find_by_identifier(dto.identifier)
            if user is None or not user.verify_password(dto.password):
                raise UnauthorizedError("invalid credentials")
            user_out = self._to_public(user)

        tokens = self.sessions.issue_pair(str(user_out.id))
        return AuthResultOut(user=user_out, tokens=tokens)

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_user(self, subject: str) -> UserPublicOut:
        """
        Retrieve the user behind an authenticated subject.

        :param subject: Subject string from a verified access token.
        :type subject: str
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises NotFoundError: If user does not exist.
        """

        user_id = self._user_id(subject)
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", subject)
            return self._to_public(user)

    # --------------------------------------------------------------------- #
    # Password management
    # --------------------------------------------------------------------- #

    def change_password(self, dto: PasswordChangeIn) -> None:
        """
        Change a user's password, then revoke all of their refresh tokens.

        The new hash is committed first. When revoking afterwards fails the
        password stays changed and :class:`PartialFailureError` is raised.

        :param dto: Input DTO containing current and new passwords.
        :type dto: PasswordChangeIn
        :raises NotFoundError: When user not found.
        :raises UnauthorizedError: When current password verification fails.
        :raises PartialFailureError: When revoke-all fails after the commit.
        """

        user_id = self._user_id(dto.subject)
        with self.rw_uow() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", dto.subject)
            if not user.verify_password(dto.current_password):
                raise UnauthorizedError("invalid current password")

            store: UserStore = uow.users
            store.update_password_hash(user_id, generate_password_hash(dto.new_password))

        try:
            self.sessions.revoke_all(dto.subject)
        except StorageError as exc:
            log.error(
                "identity.password_changed_sessions_kept",
                extra={"subject": dto.subject},
                exc_info=True,
            )
            raise PartialFailureError(
                "password changed, but existing sessions could not be revoked"
            ) from exc

    # --------------------------------------------------------------------- #
    # Helpers
    # --------------------------------------------------------------------- #

    @staticmethod
    def _user_id(subject: str) -> int:
        if not subject.isdigit():
            raise NotFoundError("User", subject)
        return int(subject)

    @staticmethod
    def _to_public(user: UserRecord) -> UserPublicOut:
        return UserPublicOut(
            id=user.id,
            username=user.username,
            email=user.email,
            created_at=user.created_at,
        )
