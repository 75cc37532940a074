"""
routes/roles.py - Global square role CRUD route handlers.

Endpoints (url_prefix=/api/v1/sqr-role):
  GET    /sqr-role          → 200  list roles
  POST   /sqr-role          → 201  create role
  GET    /sqr-role/:id      → 200  get role
  PUT    /sqr-role/:id      → 200  update role
  DELETE /sqr-role/:ids     → 200  delete roles (and their grants)
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from square_admin.app.extensions import db
from square_admin.app.middleware.auth_middleware import require_auth
from square_admin.app.schemas.id_list import parse_id_list
from square_admin.app.schemas.square_schema import RoleSchema
from square_admin.app.services import role_service

sqr_role_bp = Blueprint("sqr_role", __name__)


@sqr_role_bp.route("", methods=["GET"])
@require_auth
def list_roles():
    result = role_service.list_roles(session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@sqr_role_bp.route("", methods=["POST"])
@require_auth
def create_role():
    data = RoleSchema().load(request.get_json(force=True, silent=True) or {})
    result = role_service.create_role(
        name=data["name"],
        caption=data["caption"],
        description=data["description"],
        group_id=data["group_id"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@sqr_role_bp.route("/<int:role_id>", methods=["GET"])
@require_auth
def get_role(role_id: int):
    result = role_service.get_role(role_id=role_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@sqr_role_bp.route("/<int:role_id>", methods=["PUT"])
@require_auth
def update_role(role_id: int):
    data = RoleSchema().load(request.get_json(force=True, silent=True) or {})
    result = role_service.update_role(
        role_id=role_id,
        name=data["name"],
        caption=data["caption"],
        description=data["description"],
        group_id=data["group_id"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@sqr_role_bp.route("/<role_ids>", methods=["DELETE"])
@require_auth
def delete_roles(role_ids: str):
    ids = parse_id_list(role_ids, field="roleIds")
    role_service.delete_roles(role_ids=ids, session=db.session)
    db.session.commit()
    return jsonify({"data": {"deleted": ids}, "warnings": []}), 200
