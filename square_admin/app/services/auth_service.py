"""
services/auth_service.py - Authentication and caller-capability logic.

Responsibilities:
  - Credential validation (bcrypt) and JWT access token creation (HS256)
  - Password hashing for seeding users
  - The admin capability check used by square listing

Layer rules:
  - No imports from routes or schemas
  - No use of flask.request, flask.g, or HTTP status codes beyond AppError
  - current_app.config is read ONLY for JWT settings and bcrypt rounds

Token design:
  - Access token: JWT, HS256, sub = user_id (str), TTL from JWT_ACCESS_TOKEN_EXPIRES
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone

import bcrypt
import jwt
from flask import current_app
from sqlalchemy import select
from sqlalchemy.orm import Session

from square_admin.app.errors import AppError, ErrorCode
from square_admin.app.models.group import AdmGroup, AdmUserGroup
from square_admin.app.models.user import AdmUser

logger = logging.getLogger(__name__)

# Members of this authorization group see every square.
ADMIN_GROUP_NAME = "admin"


# ── Tokens and passwords ───────────────────────────────────────────────────

def create_access_token(user_id: int) -> str:
    """
    Creates a signed JWT access token.
    Payload: sub (user_id as str), iat, exp, jti.
    """
    now = datetime.now(timezone.utc)
    expiry = now + current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": expiry,
        # Guarantees each issued token is unique even if generated in the same second.
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def hash_password(password: str, rounds: int = 12) -> str:
    """bcrypt hash of `password` as a str, ready for AdmUser.password_hash."""
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=rounds),
    ).decode("utf-8")


# ── Private helpers ────────────────────────────────────────────────────────

def _build_user_dict(user: AdmUser, is_admin: bool) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "caption": user.caption,
        "isAdmin": is_admin,
    }


# ── Public service functions ───────────────────────────────────────────────

def user_is_admin(user_id: int, session: Session) -> bool:
    """True when the user belongs to the authorization group named `admin`."""
    stmt = (
        select(AdmUserGroup.id)
        .join(AdmGroup, AdmGroup.id == AdmUserGroup.group_id)
        .where(
            AdmUserGroup.user_id == user_id,
            AdmGroup.name == ADMIN_GROUP_NAME,
        )
        .limit(1)
    )
    return session.execute(stmt).scalar_one_or_none() is not None


def login_user(name: str, password: str, session: Session) -> dict:
    """
    Validates credentials and issues an access token.

    Raises:
      AppError(INVALID_CREDENTIALS, 401) - user not found, no password set, or
      password wrong. The same error for all three avoids name enumeration.

    Returns: {"user": {...}, "accessToken": "..."}
    """
    user = session.execute(
        select(AdmUser).where(AdmUser.name == name)
    ).scalar_one_or_none()

    if user is None or not user.password_hash or not bcrypt.checkpw(
            password.encode("utf-8"),
            user.password_hash.encode("utf-8"),
    ):
        logger.info("Rejected login for %r", name)
        raise AppError(
            ErrorCode.INVALID_CREDENTIALS,
            "The user name or password is incorrect.",
            401,
        )

    return {
        "user": _build_user_dict(user, user_is_admin(user.id, session)),
        "accessToken": create_access_token(user.id),
    }


def get_current_user(user_id: int, session: Session) -> dict:
    """
    Returns the profile of the currently authenticated user.

    Raises:
      AppError(USER_NOT_FOUND, 404) - user_id from the JWT no longer exists.
    """
    user = session.get(AdmUser, user_id)
    if user is None:
        raise AppError(
            ErrorCode.USER_NOT_FOUND,
            f"User {user_id} not found.",
            404,
        )
    return _build_user_dict(user, user_is_admin(user_id, session))
