"""Unit tests for the Flask-JWT-Extended token codec."""

from __future__ import annotations

from datetime import timedelta

import pytest

from authapi.infra.jwt.flask_jwt_token_codec import FlaskJWTTokenCodec
from authapi.services._shared.errors import ConfigError, InvalidTokenError
from authapi.services._shared.ports import TokenKind
from tests.helpers.tokens import craft_token


@pytest.fixture()
def codec(app) -> FlaskJWTTokenCodec:
    return FlaskJWTTokenCodec()


@pytest.fixture()
def secret(app) -> str:
    return app.config["JWT_SECRET_KEY"]


class TestIssueAndVerify:
    @pytest.mark.parametrize("kind", [TokenKind.ACCESS, TokenKind.REFRESH])
    def test_roundtrip_preserves_subject_and_kind(self, codec, kind):
        token = codec.issue("42", kind, timedelta(minutes=5))

        claims = codec.verify(token)

        assert claims.subject == "42"
        assert claims.kind is kind
        assert claims.expires_at - claims.issued_at == timedelta(minutes=5)
        assert claims.jti

    def test_each_issue_yields_a_distinct_token(self, codec):
        a = codec.issue("1", TokenKind.REFRESH, timedelta(days=30))
        b = codec.issue("1", TokenKind.REFRESH, timedelta(days=30))
        assert a != b

    def test_issue_without_secret_raises_config_error(self, app, codec):
        app.config["JWT_SECRET_KEY"] = ""
        with pytest.raises(ConfigError):
            codec.issue("1", TokenKind.ACCESS, timedelta(minutes=1))


class TestExpiry:
    def test_valid_until_expiry_and_invalid_from_it(self, codec, freeze_time):
        with freeze_time("2026-01-01 00:00:00") as frozen:
            token = codec.issue("7", TokenKind.ACCESS, timedelta(seconds=60))

            frozen.tick(59)
            assert codec.verify(token).subject == "7"

            frozen.tick(1)  # now == exp
            with pytest.raises(InvalidTokenError):
                codec.verify(token)

    def test_configured_lifetimes_match_defaults(self, sessions, codec):
        assert sessions.cfg.access_expires == timedelta(hours=12)
        assert sessions.cfg.refresh_expires == timedelta(days=30)

    def test_refresh_token_lives_thirty_days(self, sessions, codec, freeze_time):
        with freeze_time("2026-01-01 00:00:00") as frozen:
            token = codec.issue("9", TokenKind.REFRESH, sessions.cfg.refresh_expires)
            frozen.tick(timedelta(days=30) - timedelta(seconds=1))
            assert codec.verify(token).kind is TokenKind.REFRESH
            frozen.tick(timedelta(seconds=1))
            with pytest.raises(InvalidTokenError):
                codec.verify(token)


class TestRejection:
    def test_tampered_payload(self, codec, secret):
        token = codec.issue("1", TokenKind.ACCESS, timedelta(minutes=5))
        forged_payload = craft_token(secret, subject="2", kind="access").split(".")[1]
        header, _, signature = token.split(".")

        with pytest.raises(InvalidTokenError):
            codec.verify(".".join([header, forged_payload, signature]))

    def test_foreign_secret(self, codec):
        token = craft_token("another-secret-that-is-long-enough-for-hs256")
        with pytest.raises(InvalidTokenError):
            codec.verify(token)

    def test_unexpected_algorithm(self, codec, secret):
        token = craft_token(secret, algorithm="HS512")
        with pytest.raises(InvalidTokenError):
            codec.verify(token)

    def test_unsigned_token(self, codec):
        token = craft_token(None, algorithm="none")
        with pytest.raises(InvalidTokenError):
            codec.verify(token)

    def test_unknown_kind_claim(self, codec, secret):
        token = craft_token(secret, kind="id")
        with pytest.raises(InvalidTokenError):
            codec.verify(token)

    def test_missing_subject(self, codec, secret):
        token = craft_token(secret, sub=None)
        with pytest.raises(InvalidTokenError):
            codec.verify(token)

    @pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c", "eyJhbGciOiJIUzI1NiJ9.e30."])
    def test_malformed(self, codec, garbage):
        with pytest.raises(InvalidTokenError):
            codec.verify(garbage)
