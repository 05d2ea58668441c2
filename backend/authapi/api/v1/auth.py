"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from authapi.api.admission import rate_limited
from authapi.api.deps import (
    current_subject,
    get_identity_service,
    get_sessions,
    json_response,
    require_auth,
    timing,
)
from authapi.schemas import (
    ChangePasswordSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from authapi.services.identity.dto import LoginIn, PasswordChangeIn, RegisterIn
from authapi.services.sessions.dto import LogoutIn, RefreshIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
change_password_schema = ChangePasswordSchema()
token_schema = TokenPairSchema()
user_schema = UserSchema()


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@rate_limited("register")
@timing
def register():
    """Create an account and return its first token pair."""

    data = register_schema.load(_json_body())
    result = get_identity_service().register(RegisterIn(**data))
    body = {"message": "registered successfully", **token_schema.dump(result.tokens)}
    return json_response(body, status=201)


@bp.post("/login")
@rate_limited("login")
@timing
def login():
    """Authenticate by email or username and issue a token pair."""

    data = login_schema.load(_json_body())
    result = get_identity_service().login(LoginIn(**data))
    body = {
        "message": "login successfully",
        **token_schema.dump(result.tokens),
        "user": user_schema.dump(result.user),
    }
    return json_response(body)


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a new pair."""

    data = refresh_schema.load(_json_body())
    pair = get_sessions().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response(token_schema.dump(pair))


@bp.post("/logout")
@timing
def logout():
    """Revoke a refresh token. Unknown tokens are accepted."""

    data = refresh_schema.load(_json_body())
    get_sessions().logout(LogoutIn(refresh_token=data["refresh_token"]))
    return json_response({"message": "logged out"})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user's profile."""

    user = get_identity_service().get_user(current_subject())
    return json_response(user_schema.dump(user))


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    """Change the password and log out every session of the user."""

    data = change_password_schema.load(_json_body())
    get_identity_service().change_password(PasswordChangeIn(subject=current_subject(), **data))
    return json_response(
        {"message": "password changed successfully, all sessions have been logged out"}
    )
