"""
routes/auth.py - Authentication route handlers.

Layer rules:
  - Parse request body
  - Validate with the schema (raises ValidationError on bad input)
  - Call exactly ONE service function
  - Return the standard response envelope: {"data": {...}, "warnings": []}

Endpoints (url_prefix=/api/v1/auth):
  POST   /auth/login     → 200
  GET    /auth/me        → 200
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from square_admin.app.extensions import db
from square_admin.app.middleware.auth_middleware import require_auth
from square_admin.app.schemas.auth_schema import LoginSchema
from square_admin.app.services import auth_service

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/login", methods=["POST"])
def login():
    """POST /auth/login - Authenticate; return an access token. (No auth required.)"""
    data = LoginSchema().load(request.get_json(force=True, silent=True) or {})
    result = auth_service.login_user(
        name=data["name"],
        password=data["password"],
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    """GET /auth/me - Profile and admin capability of the caller."""
    result = auth_service.get_current_user(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200
