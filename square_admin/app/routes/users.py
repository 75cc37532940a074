"""
routes/users.py - User administration and user-group route handlers.

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries.

Endpoints (url_prefix=/api/v1/adm-user):
  GET    /adm-user                               → 200  list users (?fastFilter)
  POST   /adm-user                               → 201  create user
  GET    /adm-user/:id                           → 200  get user
  PUT    /adm-user/:id                           → 200  update user
  DELETE /adm-user/:ids                          → 200  delete users
  GET    /adm-user/:userId/adm-group             → 200  groups of user (?showAllGroups)
  POST   /adm-user/:userId/adm-group/:groupIds   → 201  add user to groups
  DELETE /adm-user/:userId/adm-group/:groupIds   → 200  remove user from groups
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from square_admin.app.extensions import db
from square_admin.app.middleware.auth_middleware import require_auth
from square_admin.app.schemas.adm_schema import (
    UserGroupQuerySchema,
    UserQuerySchema,
    UserSchema,
)
from square_admin.app.schemas.id_list import parse_id_list
from square_admin.app.services import user_service

adm_user_bp = Blueprint("adm_user", __name__)


@adm_user_bp.route("", methods=["GET"])
@require_auth
def list_users():
    query = UserQuerySchema().load(request.args.to_dict())
    result = user_service.list_users(fast_filter=query["fast_filter"], session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@adm_user_bp.route("", methods=["POST"])
@require_auth
def create_user():
    data = UserSchema().load(request.get_json(force=True, silent=True) or {})
    result = user_service.create_user(
        name=data["name"],
        caption=data["caption"],
        password=data["password"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@adm_user_bp.route("/<int:user_id>", methods=["GET"])
@require_auth
def get_user(user_id: int):
    result = user_service.get_user(user_id=user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@adm_user_bp.route("/<int:user_id>", methods=["PUT"])
@require_auth
def update_user(user_id: int):
    data = UserSchema().load(request.get_json(force=True, silent=True) or {})
    result = user_service.update_user(
        user_id=user_id,
        name=data["name"],
        caption=data["caption"],
        password=data["password"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@adm_user_bp.route("/<user_ids>", methods=["DELETE"])
@require_auth
def delete_users(user_ids: str):
    ids = parse_id_list(user_ids, field="userIds")
    user_service.delete_users(user_ids=ids, session=db.session)
    db.session.commit()
    return jsonify({"data": {"deleted": ids}, "warnings": []}), 200


@adm_user_bp.route("/<int:user_id>/adm-group", methods=["GET"])
@require_auth
def list_user_groups(user_id: int):
    query = UserGroupQuerySchema().load(request.args.to_dict())
    result = user_service.list_user_groups(
        user_id=user_id,
        show_all_groups=query["show_all_groups"],
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@adm_user_bp.route("/<int:user_id>/adm-group/<group_ids>", methods=["POST"])
@require_auth
def add_user_groups(user_id: int, group_ids: str):
    ids = parse_id_list(group_ids, field="groupIds")
    created = user_service.add_user_groups(user_id=user_id, group_ids=ids, session=db.session)
    db.session.commit()
    return jsonify({"data": {"created": created}, "warnings": []}), 201


@adm_user_bp.route("/<int:user_id>/adm-group/<group_ids>", methods=["DELETE"])
@require_auth
def remove_user_groups(user_id: int, group_ids: str):
    ids = parse_id_list(group_ids, field="groupIds")
    removed = user_service.remove_user_groups(user_id=user_id, group_ids=ids, session=db.session)
    db.session.commit()
    return jsonify({"data": {"removed": removed}, "warnings": []}), 200
