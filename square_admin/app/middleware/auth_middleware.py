"""
middleware/auth_middleware.py - JWT bearer authentication decorator.

@require_auth reads "Authorization: Bearer <token>", verifies the HS256
signature and expiry, and attaches the caller's id to flask.g.user_id.

It authenticates only (401). Capability checks such as "may this caller see
every square" belong to the services, which receive the user id as a plain
int argument.

Error codes:
  TOKEN_MISSING  (401) - no Authorization header
  TOKEN_INVALID  (401) - malformed header, bad signature, or bad payload
  TOKEN_EXPIRED  (401) - valid token whose exp claim is in the past
"""

from __future__ import annotations

import functools
from typing import Callable

import jwt
from flask import current_app, g, request

from square_admin.app.errors import AppError, ErrorCode


def require_auth(f: Callable) -> Callable:
    """
    Route decorator that enforces JWT authentication.

    Usage:
        @sqr_square_bp.route("/", methods=["GET"])
        @require_auth
        def list_squares():
            caller_id = g.user_id  # always an int when this runs
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        _authenticate_request()
        return f(*args, **kwargs)

    return decorated


def _invalid(message: str) -> AppError:
    return AppError(ErrorCode.TOKEN_INVALID, message, 401)


def _authenticate_request() -> None:
    """
    Performs the JWT authentication sequence and sets flask.g.user_id.

    Raises AppError on any failure; the global error handler renders it.
    """
    auth_header = request.headers.get("Authorization", "")

    if not auth_header:
        raise AppError(
            ErrorCode.TOKEN_MISSING,
            "Authentication required. Provide a Bearer token in the Authorization header.",
            401,
        )

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise _invalid("Authorization header must be in the format: Bearer <token>.")

    try:
        payload = jwt.decode(
            parts[1],
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.ExpiredSignatureError:
        raise AppError(
            ErrorCode.TOKEN_EXPIRED,
            "The access token has expired. Log in again to obtain a new one.",
            401,
        )
    except jwt.InvalidTokenError:
        raise _invalid("The access token is invalid or has been tampered with.")

    sub = payload.get("sub")
    if sub is None:
        raise _invalid("The access token is missing the required 'sub' claim.")

    try:
        g.user_id = int(sub)
    except (TypeError, ValueError):
        raise _invalid("The 'sub' claim in the access token is not a valid user ID.")
