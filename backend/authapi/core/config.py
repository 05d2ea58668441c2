"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Loads .env during development (no-op when absent)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


def parse_rate(value: str) -> tuple[int, int]:
    """Parse a ``"<max>/<seconds>"`` rate rule.

    Parameters
    ----------
    value: str
        Rule such as ``"5/60"`` (five requests per sixty seconds).

    Returns
    -------
    tuple[int, int]
        ``(max_requests, window_seconds)``.

    Raises
    ------
    ValueError
        If the rule is malformed or either side is not a positive integer.
    """
    try:
        raw_max, raw_window = value.split("/", 1)
        max_requests, window = int(raw_max), int(raw_window)
    except ValueError as exc:
        raise ValueError(f"Invalid rate rule {value!r}; expected '<max>/<seconds>'") from exc
    if max_requests < 1 or window < 1:
        raise ValueError(f"Invalid rate rule {value!r}; values must be positive")
    return max_requests, window


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    JWT_SECRET_KEY: str
        HMAC key used to sign and verify session tokens. There is no default:
        an empty value makes :func:`authapi.create_app` fail at startup.
    JWT_ALGORITHM: str
        Expected symmetric signing scheme (``HS256``).
    ACCESS_TOKEN_TTL_SECONDS: int
        Access token lifetime (12 hours).
    REFRESH_TOKEN_TTL_SECONDS: int
        Refresh token lifetime (30 days).
    REVOCATION_LEDGER: str
        Backing store for refresh-token records: ``sql``, ``redis`` or ``memory``.
    RATE_LIMIT_REGISTER / RATE_LIMIT_LOGIN: str
        Fixed-window admission rules (``"<max>/<seconds>"``).
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Secrets / tokens
    SECRET_KEY = os.getenv("SECRET_KEY", "")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_DECODE_LEEWAY = 0
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 12 * 60 * 60)
    REFRESH_TOKEN_TTL_SECONDS = env_int("REFRESH_TOKEN_TTL_SECONDS", 30 * 24 * 60 * 60)

    # Revocation ledger
    REVOCATION_LEDGER = os.getenv("REVOCATION_LEDGER", "sql")
    REDIS_URL = os.getenv("REDIS_URL", "")
    REDIS_SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "2.0"))

    # Admission
    RATE_LIMIT_REGISTER = os.getenv("RATE_LIMIT_REGISTER", "5/60")
    RATE_LIMIT_LOGIN = os.getenv("RATE_LIMIT_LOGIN", "10/60")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    CORS_MAX_AGE = 600

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Ships a fixed signing secret so token tests are reproducible.
    - Keeps the in-memory ledger out of the way: tests exercise the SQL one.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REVOCATION_LEDGER = "sql"
    PROPAGATE_EXCEPTIONS = True
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
