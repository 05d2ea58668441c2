"""Session lifecycle: issuance, rotation and revocation of token pairs."""

from __future__ import annotations

from .dto import AuthTokenConfig, LogoutIn, RefreshIn, TokenPairOut
from .service import SessionManager

__all__ = ["AuthTokenConfig", "LogoutIn", "RefreshIn", "SessionManager", "TokenPairOut"]
