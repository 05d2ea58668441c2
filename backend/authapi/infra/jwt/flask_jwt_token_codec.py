# authapi/infra/jwt/flask_jwt_token_codec.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from flask import current_app
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from authapi.services._shared.errors import ConfigError, InvalidTokenError
from authapi.services._shared.ports import TokenClaims, TokenCodec, TokenKind


@dataclass(slots=True)
class FlaskJWTTokenCodec(TokenCodec):
    """
    Token codec backed by Flask-JWT-Extended (HS256 by default).

    .. note::
       Requires an active Flask app context with ``JWT_SECRET_KEY`` set; the
       algorithm accepted on decode is the configured ``JWT_ALGORITHM`` only.
    """

    def _require_secret(self) -> None:
        if not current_app.config.get("JWT_SECRET_KEY"):
            raise ConfigError("JWT_SECRET_KEY is not configured")

    def issue(self, subject: str, kind: TokenKind, ttl: timedelta) -> str:
        from flask_jwt_extended import create_access_token, create_refresh_token

        self._require_secret()
        # Flask-JWT-Extended stamps iat/nbf/exp from the current UTC time and
        # writes the kind into the "type" claim.
        if kind is TokenKind.ACCESS:
            token = create_access_token(identity=str(subject), expires_delta=ttl)
        else:
            token = create_refresh_token(identity=str(subject), expires_delta=ttl)
        return cast(str, token)

    def verify(self, token: str) -> TokenClaims:
        from flask_jwt_extended import decode_token

        self._require_secret()
        try:
            decoded = cast(dict[str, Any], decode_token(token))
        except (PyJWTError, JWTExtendedException, ValueError, TypeError) as exc:
            raise InvalidTokenError() from exc
        return self._to_claims(decoded)

    @staticmethod
    def _to_claims(decoded: dict[str, Any]) -> TokenClaims:
        try:
            kind = TokenKind(decoded["type"])
            subject = decoded["sub"]
            issued_at = datetime.fromtimestamp(int(decoded["iat"]), tz=UTC)
            expires_at = datetime.fromtimestamp(int(decoded["exp"]), tz=UTC)
            jti = str(decoded.get("jti", ""))
        except (KeyError, ValueError, TypeError) as exc:
            raise InvalidTokenError() from exc
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError()
        return TokenClaims(
            subject=subject,
            kind=kind,
            issued_at=issued_at,
            expires_at=expires_at,
            jti=jti,
        )
