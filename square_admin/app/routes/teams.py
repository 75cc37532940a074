"""
routes/teams.py - Team CRUD and team placement route handlers.

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries.

Endpoints (url_prefix=/api/v1/sqr-square):
  GET    /:squareId/sqr-team                                  → 200  list teams
  POST   /:squareId/sqr-team                                  → 201  create team
  GET    /:squareId/sqr-team/:teamId                          → 200  get team
  PUT    /:squareId/sqr-team/:teamId                          → 200  update team
  DELETE /:squareId/sqr-team/:teamIds                         → 200  delete teams
  GET    /:squareId/sqr-team/:teamId/user                     → 200  team members
  POST   /:squareId/sqr-team/:teamIds/user/:squareUserIds     → 200  place on team
  DELETE /:squareId/sqr-team/:teamIds/user/:squareUserIds     → 200  take off team

The ids after /user/ are membership row ids, as returned by the member listing.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from square_admin.app.extensions import db
from square_admin.app.middleware.auth_middleware import require_auth
from square_admin.app.schemas.id_list import parse_id_list
from square_admin.app.schemas.square_schema import MemberQuerySchema, TeamSchema
from square_admin.app.services import membership_service, square_service

sqr_team_bp = Blueprint("sqr_team", __name__)


@sqr_team_bp.route("/<int:square_id>/sqr-team", methods=["GET"])
@require_auth
def list_teams(square_id: int):
    """GET /sqr-square/:squareId/sqr-team"""
    result = square_service.list_teams(square_id=square_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@sqr_team_bp.route("/<int:square_id>/sqr-team", methods=["POST"])
@require_auth
def create_team(square_id: int):
    """POST /sqr-square/:squareId/sqr-team"""
    data = TeamSchema().load(request.get_json(force=True, silent=True) or {})
    result = square_service.create_team(
        square_id=square_id,
        name=data["name"],
        caption=data["caption"],
        description=data["description"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@sqr_team_bp.route("/<int:square_id>/sqr-team/<int:team_id>", methods=["GET"])
@require_auth
def get_team(square_id: int, team_id: int):
    """GET /sqr-square/:squareId/sqr-team/:teamId"""
    result = square_service.get_team(square_id=square_id, team_id=team_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@sqr_team_bp.route("/<int:square_id>/sqr-team/<int:team_id>", methods=["PUT"])
@require_auth
def update_team(square_id: int, team_id: int):
    """PUT /sqr-square/:squareId/sqr-team/:teamId"""
    data = TeamSchema().load(request.get_json(force=True, silent=True) or {})
    result = square_service.update_team(
        square_id=square_id,
        team_id=team_id,
        name=data["name"],
        caption=data["caption"],
        description=data["description"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@sqr_team_bp.route("/<int:square_id>/sqr-team/<team_ids>", methods=["DELETE"])
@require_auth
def delete_teams(square_id: int, team_ids: str):
    """DELETE /sqr-square/:squareId/sqr-team/:teamIds - Missing ids are ignored."""
    ids = parse_id_list(team_ids, field="teamIds")
    square_service.delete_teams(square_id=square_id, team_ids=ids, session=db.session)
    db.session.commit()
    return jsonify({"data": {"deleted": ids}, "warnings": []}), 200


# ── Team members ───────────────────────────────────────────────────────────

@sqr_team_bp.route("/<int:square_id>/sqr-team/<int:team_id>/user", methods=["GET"])
@require_auth
def list_team_members(square_id: int, team_id: int):
    """GET .../sqr-team/:teamId/user?showAllUsers&fastFilter"""
    query = MemberQuerySchema().load(request.args.to_dict())
    result = membership_service.list_team_members(
        square_id=square_id,
        team_id=team_id,
        show_all_users=query["show_all_users"],
        fast_filter=query["fast_filter"],
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@sqr_team_bp.route("/<int:square_id>/sqr-team/<team_ids>/user/<square_user_ids>", methods=["POST"])
@require_auth
def assign_to_teams(square_id: int, team_ids: str, square_user_ids: str):
    """POST .../sqr-team/:teamIds/user/:squareUserIds - The last team id wins."""
    teams = parse_id_list(team_ids, field="teamIds")
    members = parse_id_list(square_user_ids, field="squareUserIds")
    updated = membership_service.assign_to_teams(
        square_id=square_id,
        team_ids=teams,
        square_user_ids=members,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": {"updated": updated}, "warnings": []}), 200


@sqr_team_bp.route("/<int:square_id>/sqr-team/<team_ids>/user/<square_user_ids>", methods=["DELETE"])
@require_auth
def unassign_from_teams(square_id: int, team_ids: str, square_user_ids: str):
    """DELETE .../sqr-team/:teamIds/user/:squareUserIds"""
    teams = parse_id_list(team_ids, field="teamIds")
    members = parse_id_list(square_user_ids, field="squareUserIds")
    updated = membership_service.unassign_from_teams(
        square_id=square_id,
        team_ids=teams,
        square_user_ids=members,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": {"updated": updated}, "warnings": []}), 200
