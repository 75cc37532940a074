"""
schemas/auth_schema.py - Marshmallow schema for the login endpoint.

Credential correctness is checked in auth_service.py (INVALID_CREDENTIALS, 401),
not here, because it requires a DB lookup.

IMPORTANT: Inherits from marshmallow.Schema directly, so unit tests can load
it without an application context.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class LoginSchema(Schema):
    """
    POST /auth/login

    Accepts the user's login name + password.
    """

    name = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=100),
    )
    password = fields.Str(required=True, load_only=True)
