"""Unit tests for the SQLAlchemy revocation ledger."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from authapi.infra.db.sql_revocation_ledger import SQLRevocationLedger
from authapi.models.refresh_token import RefreshToken
from authapi.services._shared.errors import StorageError
from authapi.services._shared.ports import hash_token
from tests.factories.user import UserFactory


@pytest.fixture()
def ledger(app) -> SQLRevocationLedger:
    return SQLRevocationLedger()


def _future(seconds: int = 300) -> datetime:
    return datetime.now(UTC) + timedelta(seconds=seconds)


class TestSQLRevocationLedger:
    def test_record_persists_hash_not_token(self, ledger, user, session):
        ledger.record(str(user.id), "raw-token", _future())

        row = session.execute(select(RefreshToken)).scalars().one()
        assert row.token_hash == hash_token("raw-token")
        assert row.subject == str(user.id)
        assert row.revoked is False

    def test_record_then_valid(self, ledger, user):
        ledger.record(str(user.id), "raw-token", _future())
        assert ledger.is_valid("raw-token") is True

    def test_unknown_is_not_valid(self, ledger):
        assert ledger.is_valid("never-issued") is False
        assert ledger.get("never-issued") is None

    def test_revoke_flips_flag_once(self, ledger, user):
        ledger.record(str(user.id), "raw-token", _future())

        ledger.revoke("raw-token")
        ledger.revoke("raw-token")

        assert ledger.is_valid("raw-token") is False
        assert ledger.get("raw-token").revoked is True

    def test_re_recording_a_revoked_token_keeps_it_revoked(self, ledger, user, session):
        ledger.record(str(user.id), "raw-token", _future())
        ledger.revoke("raw-token")

        ledger.record(str(user.id), "raw-token", _future(600))

        assert ledger.is_valid("raw-token") is False
        assert len(session.execute(select(RefreshToken)).scalars().all()) == 1

    def test_non_numeric_subjects_are_opaque(self, ledger, session):
        ledger.record("alice", "a1", _future())
        ledger.record("alice", "a2", _future())
        ledger.record("bob", "b1", _future())

        ledger.revoke_all("alice")

        assert ledger.get("a1").subject == "alice"
        assert not ledger.is_valid("a1")
        assert not ledger.is_valid("a2")
        assert ledger.is_valid("b1")

    def test_revoke_unknown_is_noop(self, ledger):
        ledger.revoke("never-issued")

    def test_expiry_is_checked_at_call_time(self, ledger, user, freeze_time):
        with freeze_time("2026-01-01 00:00:00") as frozen:
            ledger.record(str(user.id), "raw-token", datetime.now(UTC) + timedelta(seconds=30))
            frozen.tick(29)
            assert ledger.is_valid("raw-token") is True
            frozen.tick(1)
            assert ledger.is_valid("raw-token") is False

    def test_expiry_roundtrips_as_utc(self, ledger, user):
        expires = datetime(2030, 5, 1, 12, 0, tzinfo=UTC)
        ledger.record(str(user.id), "raw-token", expires)
        assert ledger.get("raw-token").expires_at == expires

    def test_revoke_all_is_scoped_to_subject(self, ledger):
        alice, bob = UserFactory(), UserFactory()
        ledger.record(str(alice.id), "a1", _future())
        ledger.record(str(alice.id), "a2", _future())
        ledger.record(str(bob.id), "b1", _future())

        ledger.revoke_all(str(alice.id))

        assert not ledger.is_valid("a1")
        assert not ledger.is_valid("a2")
        assert ledger.is_valid("b1")

    def test_backend_failure_surfaces_as_storage_error(self, ledger, db):
        db.drop_all()
        with pytest.raises(StorageError):
            ledger.is_valid("anything")
        with pytest.raises(StorageError):
            ledger.revoke("anything")
