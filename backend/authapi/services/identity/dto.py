"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from authapi.services.sessions.dto import TokenPairOut

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for user registration.

    :param username: Public username (unique).
    :type username: str
    :param email: Login email (normalized to lowercase by the model).
    :type email: str
    :param password: Raw password to be hashed by the model.
    :type password: str
    """

    username: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for authentication.

    :param identifier: Email address or username.
    :type identifier: str
    :param password: Raw password.
    :type password: str
    """

    identifier: str
    password: str


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    """
    Input DTO for changing a user's password.

    :param subject: Authenticated subject (user id as string).
    :type subject: str
    :param current_password: Current password.
    :type current_password: str
    :param new_password: New password (raw).
    :type new_password: str
    """

    subject: str
    current_password: str
    new_password: str


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Output DTO representing public-safe user data.

    :param id: User identifier.
    :type id: int
    :param username: Username.
    :type username: str
    :param email: Email address.
    :type email: str
    :param created_at: Registration instant.
    :type created_at: datetime
    """

    id: int
    username: str
    email: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Output DTO for register/login: the user plus a freshly issued pair.

    :param user: Public user payload.
    :type user: UserPublicOut
    :param tokens: Access/Refresh pair.
    :type tokens: TokenPairOut
    """

    user: UserPublicOut
    tokens: TokenPairOut
