"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`authapi.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``authapi.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Session manager (from ``authapi.services.sessions``)
    * :class:`SessionManager`
    * DTOs: :class:`AuthTokenConfig`, :class:`RefreshIn`, :class:`LogoutIn`,
      :class:`TokenPairOut`

- Identity service (from ``authapi.services.identity``)
    * :class:`IdentityService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`PasswordChangeIn`,
      :class:`UserPublicOut`, :class:`AuthResultOut`

- Admission (from ``authapi.services.admission``)
    * :class:`FixedWindowLimiter`, :class:`AdmissionLimiters`
"""

from __future__ import annotations

# Base primitives (service base + request-scoped context)
from ._shared.base import BaseService, ServiceContext

# Admission limiter
from .admission import AdmissionLimiters, FixedWindowLimiter

# Identity service + DTOs
from .identity.dto import AuthResultOut, LoginIn, PasswordChangeIn, RegisterIn, UserPublicOut
from .identity.service import IdentityService

# Session manager + DTOs
from .sessions import AuthTokenConfig, LogoutIn, RefreshIn, SessionManager, TokenPairOut

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Sessions
    "SessionManager",
    "AuthTokenConfig",
    "RefreshIn",
    "LogoutIn",
    "TokenPairOut",
    # Identity
    "IdentityService",
    "RegisterIn",
    "LoginIn",
    "PasswordChangeIn",
    "UserPublicOut",
    "AuthResultOut",
    # Admission
    "FixedWindowLimiter",
    "AdmissionLimiters",
]
