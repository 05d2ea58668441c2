"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask, HTTP or
SQLAlchemy. They are the stable contract between the token codec, the
revocation ledger, the session manager and the identity service.

The translation to HTTP responses (RFC 7807) is handled by
``authapi/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to ``APIError`` instances.
    """

    pass


# --------------------------------------------------------------------------- #
# Token / session errors
# --------------------------------------------------------------------------- #


class ConfigError(ServiceError):
    """
    Raised when the signing secret is missing.

    Fatal at startup (``create_app`` validates it), never a per-request
    condition in a correctly configured process.
    """


class InvalidTokenError(ServiceError):
    """
    Raised when a token fails verification or carries the wrong kind.

    Covers bad signature, unexpected algorithm, malformed payload, expiry and
    kind mismatch. The message never reveals which sub-condition failed.
    """

    def __init__(self, message: str = "invalid token") -> None:
        super().__init__(message)


class UnauthorizedError(ServiceError):
    """
    Raised when a well-formed credential is not accepted.

    Used for refresh tokens that fail ledger validity and for bad login
    credentials. Clients see the same 401 as for :class:`InvalidTokenError`.
    """

    def __init__(self, message: str = "invalid token") -> None:
        super().__init__(message)


class StorageError(ServiceError):
    """
    Raised when the revocation ledger or user store is unavailable.

    Server-side failure, distinct from unauthorized, safe to retry from the
    client side.
    """


class RateLimitedError(ServiceError):
    """Raised when the admission limiter rejects a request."""

    def __init__(self, message: str = "too many requests") -> None:
        super().__init__(message)


class PartialFailureError(ServiceError):
    """
    Raised when a multi-step operation committed its first step only.

    The change-password flow uses it when the new password hash was written
    but revoking the subject's sessions failed.
    """


# --------------------------------------------------------------------------- #
# Entity errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"
