"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from authapi.core.container import LIMITERS_KEY, SESSIONS_KEY
from authapi.core.errors import Unauthorized
from authapi.core.logger import ensure_request_id
from authapi.services._shared.base import ServiceContext
from authapi.services.admission import AdmissionLimiters
from authapi.services.identity.service import IdentityService
from authapi.services.sessions import SessionManager

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "Bearer "


def get_sessions() -> SessionManager:
    """Return the session manager built for the current application."""

    return cast(SessionManager, current_app.extensions[SESSIONS_KEY])


def get_limiters() -> AdmissionLimiters:
    """Return the admission limiters built for the current application."""

    return cast(AdmissionLimiters, current_app.extensions[LIMITERS_KEY])


def get_identity_service() -> IdentityService:
    """Build a request-scoped identity service."""

    ctx = ServiceContext(actor_id=g.get("subject"), request_id=ensure_request_id())
    return IdentityService(sessions=get_sessions(), ctx=ctx)


def bearer_token() -> str | None:
    """Extract the token from ``Authorization: Bearer <token>``."""

    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX) :].strip()
    return token or None


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token.

    The verified subject is stored in ``g.subject``. Refresh tokens, expired
    or tampered tokens and a missing header all produce the same 401.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = bearer_token()
        if token is None:
            raise Unauthorized("invalid token")
        g.subject = get_sessions().authenticate_access(token)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_subject() -> str:
    """Return the subject set by :func:`require_auth`."""

    subject = g.get("subject")
    if subject is None:
        raise Unauthorized("invalid token")
    return cast(str, subject)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
