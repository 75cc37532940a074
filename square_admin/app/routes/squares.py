"""
routes/squares.py - Square CRUD and square-role membership route handlers.

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries.

Endpoints (url_prefix=/api/v1/sqr-square):
  GET    /sqr-square                                          → 200  list visible squares
  POST   /sqr-square                                          → 201  create square
  GET    /sqr-square/:id                                      → 200  get square
  PUT    /sqr-square/:id                                      → 200  update square
  DELETE /sqr-square/:ids                                     → 200  delete squares
  GET    /sqr-square/:squareId/sqr-role                       → 200  roles grantable in square
  GET    /sqr-square/:squareId/sqr-role/:roleId/user          → 200  role members
  POST   /sqr-square/:squareId/sqr-role/:roleIds/user/:userIds → 201 grant roles
  DELETE /sqr-square/:squareId/sqr-role/:roleIds/user/:userIds → 200 revoke roles
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from square_admin.app.extensions import db
from square_admin.app.middleware.auth_middleware import require_auth
from square_admin.app.schemas.id_list import parse_id_list
from square_admin.app.schemas.square_schema import MemberQuerySchema, SquareSchema
from square_admin.app.services import (
    auth_service,
    membership_service,
    role_service,
    square_service,
)

sqr_square_bp = Blueprint("sqr_square", __name__)


@sqr_square_bp.route("", methods=["GET"])
@require_auth
def list_squares():
    """GET /sqr-square - All squares for admins, member squares otherwise."""
    result = square_service.list_squares(
        caller_id=g.user_id,
        is_admin=auth_service.user_is_admin(g.user_id, db.session),
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@sqr_square_bp.route("", methods=["POST"])
@require_auth
def create_square():
    """POST /sqr-square - Create a square."""
    data = SquareSchema().load(request.get_json(force=True, silent=True) or {})
    result = square_service.create_square(
        name=data["name"],
        caption=data["caption"],
        description=data["description"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@sqr_square_bp.route("/<int:square_id>", methods=["GET"])
@require_auth
def get_square(square_id: int):
    """GET /sqr-square/:id"""
    result = square_service.get_square(square_id=square_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@sqr_square_bp.route("/<int:square_id>", methods=["PUT"])
@require_auth
def update_square(square_id: int):
    """PUT /sqr-square/:id"""
    data = SquareSchema().load(request.get_json(force=True, silent=True) or {})
    result = square_service.update_square(
        square_id=square_id,
        name=data["name"],
        caption=data["caption"],
        description=data["description"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@sqr_square_bp.route("/<square_ids>", methods=["DELETE"])
@require_auth
def delete_squares(square_ids: str):
    """DELETE /sqr-square/:ids - Missing ids are ignored."""
    ids = parse_id_list(square_ids, field="squareIds")
    square_service.delete_squares(square_ids=ids, session=db.session)
    db.session.commit()
    return jsonify({"data": {"deleted": ids}, "warnings": []}), 200


# ── Square roles ───────────────────────────────────────────────────────────

@sqr_square_bp.route("/<int:square_id>/sqr-role", methods=["GET"])
@require_auth
def list_square_roles(square_id: int):
    """GET /sqr-square/:squareId/sqr-role"""
    result = role_service.list_square_roles(square_id=square_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@sqr_square_bp.route("/<int:square_id>/sqr-role/<int:role_id>/user", methods=["GET"])
@require_auth
def list_role_members(square_id: int, role_id: int):
    """GET .../sqr-role/:roleId/user?showAllUsers&fastFilter"""
    query = MemberQuerySchema().load(request.args.to_dict())
    result = membership_service.list_role_members(
        square_id=square_id,
        role_id=role_id,
        fast_filter=query["fast_filter"],
        show_all_users=query["show_all_users"],
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@sqr_square_bp.route("/<int:square_id>/sqr-role/<role_ids>/user/<user_ids>", methods=["POST"])
@require_auth
def grant_roles(square_id: int, role_ids: str, user_ids: str):
    """POST .../sqr-role/:roleIds/user/:userIds - Grant every role to every user."""
    roles = parse_id_list(role_ids, field="roleIds")
    users = parse_id_list(user_ids, field="userIds")
    square_service.get_square_or_404(square_id, db.session)
    created = membership_service.grant_roles(
        square_id=square_id,
        role_ids=roles,
        user_ids=users,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": {"created": created}, "warnings": []}), 201


@sqr_square_bp.route("/<int:square_id>/sqr-role/<role_ids>/user/<user_ids>", methods=["DELETE"])
@require_auth
def revoke_roles(square_id: int, role_ids: str, user_ids: str):
    """DELETE .../sqr-role/:roleIds/user/:userIds - Revoke; missing grants are ignored."""
    roles = parse_id_list(role_ids, field="roleIds")
    users = parse_id_list(user_ids, field="userIds")
    removed = membership_service.revoke_roles(
        square_id=square_id,
        role_ids=roles,
        user_ids=users,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": {"removed": removed}, "warnings": []}), 200
