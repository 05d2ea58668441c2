"""Admission control for rate-limited routes."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from flask import request

from authapi.api.deps import get_limiters
from authapi.core.errors import RateLimited

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)


def _strip_port(addr: str) -> str:
    """Drop a trailing ``:port`` from ``host:port`` or ``[v6]:port``."""
    if addr.startswith("["):
        host, _, _ = addr[1:].partition("]")
        return host
    if addr.count(":") == 1:
        return addr.split(":", 1)[0]
    return addr


def client_identity() -> str:
    """Resolve the client address used in admission keys.

    Order: first entry of ``X-Forwarded-For``, then ``X-Real-IP``, then the
    transport peer address. A blank first entry counts as absent. Forwarding
    headers are trusted as sent, so the service must sit behind a proxy that
    overwrites them.
    """
    xff = request.headers.get("X-Forwarded-For", "")
    if xff:
        first = xff.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip
    return _strip_port(request.remote_addr or "")


def admission_key(client: str) -> str:
    """Return ``"<client identity>|<route path>"`` for the current request."""
    return f"{client}|{request.path}"


def rate_limited(name: str) -> Callable[[F], F]:
    """Reject the request with 429 before the handler runs when over the limit.

    :param name: Limiter name registered in the application container.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            client = client_identity()
            if not get_limiters()[name].admit(admission_key(client)):
                log.warning(
                    "admission.rejected",
                    extra={"limiter": name, "client": client, "path": request.path},
                )
                raise RateLimited()
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
