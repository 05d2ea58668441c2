# authapi/services/sessions/service.py
from __future__ import annotations

import logging

from authapi.services._shared.errors import InvalidTokenError, UnauthorizedError
from authapi.services._shared.ports import RevocationLedger, TokenClaims, TokenCodec, TokenKind
from authapi.services.sessions.dto import AuthTokenConfig, LogoutIn, RefreshIn, TokenPairOut

log = logging.getLogger(__name__)


class SessionManager:
    """
    Session lifecycle service (issue / refresh / logout / revoke-all).

    Combines a stateless :class:`TokenCodec` with a durable
    :class:`RevocationLedger`. Access tokens are never recorded: they stay
    valid until they expire, even after the session that produced them was
    rotated or revoked. Refresh tokens are single-use.

    Per refresh token the lifecycle is ``issued -> valid -> {rotated |
    revoked | expired}``; every terminal state is absorbing.

    Holds no request state and opens no unit of work of its own: the ledger
    owns its transactions, so one instance is shared by every request.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        ledger: RevocationLedger,
        token_cfg: AuthTokenConfig | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param codec: Adapter for issuing/verifying JWTs.
        :param ledger: Durable record of issued refresh tokens.
        :param token_cfg: Access/Refresh expiry configuration.
        """
        self.codec = codec
        self.ledger = ledger
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def issue_pair(self, subject: str) -> TokenPairOut:
        """
        Mint a fresh access/refresh pair and record the refresh token.

        Nothing is returned unless the ledger accepted the record.

        :param subject: Authenticated subject identifier.
        :returns: Access/Refresh token pair.
        :raises ConfigError: If no signing secret is configured.
        :raises StorageError: If the ledger write fails.
        """
        pair = self._mint(subject)
        self._record(subject, pair.refresh_token)
        log.info("session.issued", extra={"subject": subject})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        Steps
        -----
        1. Verify signature/expiry and require the ``refresh`` kind.
        2. Require a live ledger record.
        3. Mint the new pair, revoke the old token, record the new one.

        The old token is revoked before the new one is recorded: a failure
        in between leaves the subject without a usable refresh token (they
        must sign in again) rather than with two.

        :raises InvalidTokenError: Bad signature, malformed, expired, or access kind.
        :raises UnauthorizedError: Revoked, rotated or never-issued token.
        :raises StorageError: Ledger unavailable at any step.
        """
        old = dto.refresh_token
        claims = self._verify_kind(old, TokenKind.REFRESH)

        if not self.ledger.is_valid(old):
            log.warning("session.refresh_rejected", extra={"subject": claims.subject})
            raise UnauthorizedError()

        subject = claims.subject
        pair = self._mint(subject)

        # Re-check right before revoking to narrow the window for two
        # concurrent refreshes of the same token.
        if not self.ledger.is_valid(old):
            log.warning("session.refresh_rejected", extra={"subject": subject})
            raise UnauthorizedError()
        self.ledger.revoke(old)
        self._record(subject, pair.refresh_token)

        log.info("session.rotated", extra={"subject": subject})
        return pair

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the given refresh token.

        Unknown, malformed and already revoked tokens succeed silently so
        logout never reveals whether a token existed.

        :raises StorageError: If the ledger is unavailable.
        """
        self.ledger.revoke(dto.refresh_token)

    def revoke_all(self, subject: str) -> None:
        """
        Revoke every refresh token of ``subject`` (password change).

        Outstanding access tokens stay valid until they expire.
        """
        self.ledger.revoke_all(subject)
        log.info("session.revoked_all", extra={"subject": subject})

    # ------------------------------------------------------------------ #
    # Identity extraction
    # ------------------------------------------------------------------ #

    def authenticate_access(self, token: str) -> str:
        """
        Return the subject of a valid access token.

        :raises InvalidTokenError: On any verification failure or refresh kind.
        """
        return self._verify_kind(token, TokenKind.ACCESS).subject

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _verify_kind(self, token: str, kind: TokenKind) -> TokenClaims:
        claims = self.codec.verify(token)
        if claims.kind is not kind:
            raise InvalidTokenError()
        return claims

    def _mint(self, subject: str) -> TokenPairOut:
        return TokenPairOut(
            access_token=self.codec.issue(subject, TokenKind.ACCESS, self.cfg.access_expires),
            refresh_token=self.codec.issue(subject, TokenKind.REFRESH, self.cfg.refresh_expires),
        )

    def _record(self, subject: str, refresh_token: str) -> None:
        # The ledger keeps the expiry the token itself carries.
        expires_at = self.codec.verify(refresh_token).expires_at
        self.ledger.record(subject, refresh_token, expires_at)
