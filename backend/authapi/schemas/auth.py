"""Authentication-related Marshmallow schemas.

Wire names are camelCase (``accessToken``, ``currentPassword``); attribute
names stay snake_case through ``data_key``.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

_password = validate.Length(min=8, max=130)


class _Payload(Schema):
    """Base for request bodies: unknown keys are dropped, not rejected."""

    class Meta:
        unknown = EXCLUDE


class RegisterSchema(_Payload):
    """Input payload for account registration."""

    username = fields.String(required=True, validate=validate.Length(min=3, max=30))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=_password)


class LoginSchema(_Payload):
    """Input payload for authenticating a user by email or username."""

    identifier = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1))


class RefreshTokenSchema(_Payload):
    """Input payload for refresh and logout."""

    refresh_token = fields.String(
        required=True, data_key="refreshToken", validate=validate.Length(min=1)
    )


class ChangePasswordSchema(_Payload):
    """Input payload for changing the authenticated user's password."""

    current_password = fields.String(
        required=True, data_key="currentPassword", validate=validate.Length(min=1)
    )
    new_password = fields.String(required=True, data_key="newPassword", validate=_password)


class TokenPairSchema(Schema):
    """Response payload carrying an access/refresh pair."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")


class UserSchema(Schema):
    """Response payload exposing identity details for a user."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    created_at = fields.DateTime(data_key="createdAt")
