"""Pytest fixtures building an isolated application per test.

Each test gets a fresh Flask app bound to its own in-memory SQLite database,
so committed rows, limiter counters and ledger state never leak between cases.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from flask import Flask

from authapi.core.config import TestingConfig
from authapi.core.container import SESSIONS_KEY
from authapi.core.extensions import db as _db
from authapi.factory import create_app
from authapi.services.identity.service import IdentityService
from authapi.services.sessions import SessionManager
from tests.factories import SQLAlchemySession
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


@pytest.fixture()
def app() -> Iterator[Flask]:
    """Create the application with an empty schema and an active app context.

    Yields
    ------
    flask.Flask
        Application configured with :class:`TestingConfig`.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig)
    with application.app_context():
        _db.create_all()
        SQLAlchemySession.set(_db.session)
        try:
            yield application
        finally:
            SQLAlchemySession.set(None)
            _db.session.remove()
            _db.drop_all()


@pytest.fixture()
def db(app: Flask):
    """Database extension bound to the testing application."""
    return _db


@pytest.fixture()
def session(db):
    """Flask-scoped SQLAlchemy session used by repositories and UoWs."""
    return db.session


@pytest.fixture()
def client(app: Flask):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture()
def sessions(app: Flask) -> SessionManager:
    """Session manager wired by the application container (SQL ledger)."""
    return app.extensions[SESSIONS_KEY]


@pytest.fixture()
def identity(sessions: SessionManager) -> IdentityService:
    """Identity service sharing the application's session manager."""
    return IdentityService(sessions=sessions)


@pytest.fixture()
def user(db):
    """Persist and return a user whose password is ``DEFAULT_PASSWORD``."""
    return UserFactory()


@pytest.fixture()
def password() -> str:
    return DEFAULT_PASSWORD


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2026-01-01") as frozen:
    ...         frozen.tick(60)
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2026-01-01 00:00:00")

    return _factory
