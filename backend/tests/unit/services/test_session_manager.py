"""Unit tests for SessionManager over the in-memory ledger."""

from __future__ import annotations

from datetime import timedelta

import pytest

from authapi.infra.jwt.flask_jwt_token_codec import FlaskJWTTokenCodec
from authapi.services._shared.errors import InvalidTokenError, StorageError, UnauthorizedError
from authapi.services._shared.ports import InMemoryRevocationLedger, TokenKind
from authapi.services.sessions import AuthTokenConfig, LogoutIn, RefreshIn, SessionManager
from tests.helpers.tokens import FailingLedger


@pytest.fixture()
def ledger() -> InMemoryRevocationLedger:
    return InMemoryRevocationLedger()


@pytest.fixture()
def codec(app) -> FlaskJWTTokenCodec:
    return FlaskJWTTokenCodec()


@pytest.fixture()
def manager(codec, ledger) -> SessionManager:
    return SessionManager(codec=codec, ledger=ledger)


class ConcurrentRotationLedger(InMemoryRevocationLedger):
    """Ledger where another request rotates the token right after the first check."""

    def __init__(self) -> None:
        super().__init__()
        self.checks = 0

    def is_valid(self, token):
        valid = super().is_valid(token)
        self.checks += 1
        if self.checks == 1:
            self.revoke(token)
        return valid


class TestIssuePair:
    def test_issues_access_and_recorded_refresh(self, manager, codec, ledger):
        pair = manager.issue_pair("1")

        assert codec.verify(pair.access_token).kind is TokenKind.ACCESS
        refresh_claims = codec.verify(pair.refresh_token)
        assert refresh_claims.kind is TokenKind.REFRESH
        assert ledger.is_valid(pair.refresh_token)
        # The ledger keeps the expiry carried by the token itself.
        assert ledger.get(pair.refresh_token).expires_at == refresh_claims.expires_at

    def test_access_token_is_not_recorded(self, manager, ledger):
        pair = manager.issue_pair("1")
        assert ledger.get(pair.access_token) is None

    def test_record_failure_fails_issuance(self, codec):
        manager = SessionManager(codec=codec, ledger=FailingLedger("record"))
        with pytest.raises(StorageError):
            manager.issue_pair("1")

    def test_uses_configured_lifetimes(self, codec, ledger):
        cfg = AuthTokenConfig(access_expires=timedelta(minutes=5), refresh_expires=timedelta(hours=1))
        manager = SessionManager(codec=codec, ledger=ledger, token_cfg=cfg)

        pair = manager.issue_pair("1")

        access = codec.verify(pair.access_token)
        refresh = codec.verify(pair.refresh_token)
        assert access.expires_at - access.issued_at == timedelta(minutes=5)
        assert refresh.expires_at - refresh.issued_at == timedelta(hours=1)


class TestRefresh:
    def test_rotation_invalidates_old_and_records_new(self, manager, ledger, codec):
        old = manager.issue_pair("1")

        new = manager.refresh(RefreshIn(refresh_token=old.refresh_token))

        assert new.refresh_token != old.refresh_token
        assert ledger.is_valid(old.refresh_token) is False
        assert ledger.is_valid(new.refresh_token) is True
        assert codec.verify(new.access_token).subject == "1"
        # Access tokens are not revoked by rotation.
        assert manager.authenticate_access(old.access_token) == "1"

    def test_reusing_a_rotated_token_is_unauthorized(self, manager):
        old = manager.issue_pair("1")
        manager.refresh(RefreshIn(refresh_token=old.refresh_token))

        with pytest.raises(UnauthorizedError):
            manager.refresh(RefreshIn(refresh_token=old.refresh_token))

    def test_access_token_is_rejected_as_invalid(self, manager):
        pair = manager.issue_pair("1")
        with pytest.raises(InvalidTokenError):
            manager.refresh(RefreshIn(refresh_token=pair.access_token))

    def test_signed_but_never_recorded_token_is_unauthorized(self, manager, codec):
        stray = codec.issue("1", TokenKind.REFRESH, timedelta(days=1))
        with pytest.raises(UnauthorizedError):
            manager.refresh(RefreshIn(refresh_token=stray))

    def test_malformed_token_is_invalid(self, manager):
        with pytest.raises(InvalidTokenError):
            manager.refresh(RefreshIn(refresh_token="garbage"))

    def test_expired_refresh_token_is_invalid(self, manager, freeze_time):
        with freeze_time("2026-01-01 00:00:00") as frozen:
            pair = manager.issue_pair("1")
            frozen.tick(timedelta(days=30))
            with pytest.raises(InvalidTokenError):
                manager.refresh(RefreshIn(refresh_token=pair.refresh_token))

    def test_revoke_failure_returns_no_pair_and_records_nothing(self, codec):
        ledger = FailingLedger("revoke")
        manager = SessionManager(codec=codec, ledger=ledger)
        old = manager.issue_pair("1")

        with pytest.raises(StorageError):
            manager.refresh(RefreshIn(refresh_token=old.refresh_token))

        assert len(ledger._by_hash) == 1

    def test_record_failure_after_revoke_leaves_subject_logged_out(self, codec):
        ledger = FailingLedger()
        manager = SessionManager(codec=codec, ledger=ledger)
        old = manager.issue_pair("1")
        ledger.failing.add("record")

        with pytest.raises(StorageError):
            manager.refresh(RefreshIn(refresh_token=old.refresh_token))

        assert ledger.is_valid(old.refresh_token) is False

    def test_token_rotated_concurrently_before_revoke_is_unauthorized(self, codec):
        ledger = ConcurrentRotationLedger()
        manager = SessionManager(codec=codec, ledger=ledger)
        old = manager.issue_pair("1")

        with pytest.raises(UnauthorizedError):
            manager.refresh(RefreshIn(refresh_token=old.refresh_token))

        assert ledger.checks == 2
        assert len(ledger._by_hash) == 1
        assert ledger.is_valid(old.refresh_token) is False

    def test_ledger_outage_on_validity_check(self, codec):
        ledger = FailingLedger()
        manager = SessionManager(codec=codec, ledger=ledger)
        old = manager.issue_pair("1")
        ledger.failing.add("is_valid")

        with pytest.raises(StorageError):
            manager.refresh(RefreshIn(refresh_token=old.refresh_token))


class TestLogout:
    def test_logout_revokes_refresh_token(self, manager, ledger):
        pair = manager.issue_pair("1")

        manager.logout(LogoutIn(refresh_token=pair.refresh_token))

        assert ledger.is_valid(pair.refresh_token) is False
        with pytest.raises(UnauthorizedError):
            manager.refresh(RefreshIn(refresh_token=pair.refresh_token))

    @pytest.mark.parametrize("token", ["", "unknown", "a.b.c"])
    def test_logout_with_unknown_or_malformed_token_succeeds(self, manager, token):
        manager.logout(LogoutIn(refresh_token=token))

    def test_logout_surfaces_storage_failure(self, codec):
        manager = SessionManager(codec=codec, ledger=FailingLedger("revoke"))
        with pytest.raises(StorageError):
            manager.logout(LogoutIn(refresh_token="anything"))


class TestRevokeAll:
    def test_revokes_every_session_of_subject_only(self, manager, ledger):
        a1, a2 = manager.issue_pair("1"), manager.issue_pair("1")
        b1 = manager.issue_pair("2")

        manager.revoke_all("1")

        assert not ledger.is_valid(a1.refresh_token)
        assert not ledger.is_valid(a2.refresh_token)
        assert ledger.is_valid(b1.refresh_token)


class TestAuthenticateAccess:
    def test_returns_subject(self, manager):
        pair = manager.issue_pair("42")
        assert manager.authenticate_access(pair.access_token) == "42"

    def test_rejects_refresh_token(self, manager):
        pair = manager.issue_pair("42")
        with pytest.raises(InvalidTokenError):
            manager.authenticate_access(pair.refresh_token)

    def test_access_expires_after_twelve_hours(self, manager, freeze_time):
        with freeze_time("2026-01-01 00:00:00") as frozen:
            pair = manager.issue_pair("42")
            frozen.tick(timedelta(hours=12) - timedelta(seconds=1))
            assert manager.authenticate_access(pair.access_token) == "42"
            frozen.tick(timedelta(seconds=1))
            with pytest.raises(InvalidTokenError):
                manager.authenticate_access(pair.access_token)


class TestWithApplicationLedger:
    """The container wires the SQL ledger; subjects stay opaque strings."""

    def test_non_numeric_subject_round_trip(self, sessions):
        pair = sessions.issue_pair("alice")

        rotated = sessions.refresh(RefreshIn(refresh_token=pair.refresh_token))
        assert sessions.authenticate_access(rotated.access_token) == "alice"
        with pytest.raises(UnauthorizedError):
            sessions.refresh(RefreshIn(refresh_token=pair.refresh_token))

        sessions.revoke_all("alice")
        with pytest.raises(UnauthorizedError):
            sessions.refresh(RefreshIn(refresh_token=rotated.refresh_token))
