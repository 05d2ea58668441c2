"""Composition root: builds the token, ledger, session and admission components.

Everything built here is stored in ``app.extensions`` so each application
instance owns its own limiter state and ledger client.
"""

from __future__ import annotations

from flask import Flask

from authapi.core.config import parse_rate
from authapi.core.extensions import get_redis
from authapi.infra.db.sql_revocation_ledger import SQLRevocationLedger
from authapi.infra.jwt.flask_jwt_token_codec import FlaskJWTTokenCodec
from authapi.infra.redis.redis_revocation_ledger import RedisRevocationLedger
from authapi.services._shared.errors import ConfigError
from authapi.services._shared.ports import InMemoryRevocationLedger, RevocationLedger
from authapi.services.admission import AdmissionLimiters
from authapi.services.sessions import AuthTokenConfig, SessionManager

SESSIONS_KEY = "authapi.sessions"
LIMITERS_KEY = "authapi.limiters"


def build_ledger(app: Flask) -> RevocationLedger:
    """Select the revocation ledger named by ``REVOCATION_LEDGER``."""
    kind = str(app.config.get("REVOCATION_LEDGER", "sql")).strip().lower()
    if kind == "sql":
        return SQLRevocationLedger()
    if kind == "redis":
        return RedisRevocationLedger(get_redis(app))
    if kind == "memory":
        return InMemoryRevocationLedger()
    raise ConfigError(f"Unknown REVOCATION_LEDGER {kind!r}; expected sql, redis or memory")


def build_limiters(app: Flask) -> AdmissionLimiters:
    """Build the per-route limiters from ``RATE_LIMIT_*`` rules."""
    try:
        rules = {
            "register": parse_rate(app.config["RATE_LIMIT_REGISTER"]),
            "login": parse_rate(app.config["RATE_LIMIT_LOGIN"]),
        }
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    return AdmissionLimiters.from_rules(rules)


def init_app(app: Flask) -> None:
    """Wire the session manager and admission limiters into ``app``."""
    sessions = SessionManager(
        codec=FlaskJWTTokenCodec(),
        ledger=build_ledger(app),
        token_cfg=AuthTokenConfig.from_seconds(
            int(app.config["ACCESS_TOKEN_TTL_SECONDS"]),
            int(app.config["REFRESH_TOKEN_TTL_SECONDS"]),
        ),
    )
    app.extensions[SESSIONS_KEY] = sessions
    app.extensions[LIMITERS_KEY] = build_limiters(app)
