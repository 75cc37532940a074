"""
routes/groups.py - Authorization group CRUD route handlers.

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries.

Endpoints (url_prefix=/api/v1/adm-group):
  GET    /adm-group          → 200  list groups
  POST   /adm-group          → 201  create group
  GET    /adm-group/:id      → 200  get group
  PUT    /adm-group/:id      → 200  update group
  DELETE /adm-group/:ids     → 200  delete groups (roles keep existing, detached)
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from square_admin.app.extensions import db
from square_admin.app.middleware.auth_middleware import require_auth
from square_admin.app.schemas.adm_schema import GroupSchema
from square_admin.app.schemas.id_list import parse_id_list
from square_admin.app.services import group_service

adm_group_bp = Blueprint("adm_group", __name__)


@adm_group_bp.route("", methods=["GET"])
@require_auth
def list_groups():
    result = group_service.list_groups(session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@adm_group_bp.route("", methods=["POST"])
@require_auth
def create_group():
    data = GroupSchema().load(request.get_json(force=True, silent=True) or {})
    result = group_service.create_group(
        name=data["name"],
        caption=data["caption"],
        description=data["description"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@adm_group_bp.route("/<int:group_id>", methods=["GET"])
@require_auth
def get_group(group_id: int):
    result = group_service.get_group(group_id=group_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@adm_group_bp.route("/<int:group_id>", methods=["PUT"])
@require_auth
def update_group(group_id: int):
    data = GroupSchema().load(request.get_json(force=True, silent=True) or {})
    result = group_service.update_group(
        group_id=group_id,
        name=data["name"],
        caption=data["caption"],
        description=data["description"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@adm_group_bp.route("/<group_ids>", methods=["DELETE"])
@require_auth
def delete_groups(group_ids: str):
    ids = parse_id_list(group_ids, field="groupIds")
    group_service.delete_groups(group_ids=ids, session=db.session)
    db.session.commit()
    return jsonify({"data": {"deleted": ids}, "warnings": []}), 200
