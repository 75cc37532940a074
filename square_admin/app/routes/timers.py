"""
routes/timers.py - Square timer route handlers.

Endpoints (url_prefix=/api/v1/sqr-square):
  GET    /:squareId/sqr-timer                                → 200  list timers
  POST   /:squareId/sqr-timer/recreate                       → 200  one READY timer per team
  PATCH  /:squareId/sqr-timer/set-count/:count               → 200  count on all timers
  PATCH  /:squareId/sqr-timer/:timerId/set-count/:count      → 200  count on one timer

recreate commits once after the service returns; any failure before that is
rolled back by the error handlers, leaving the previous timers in place.
"""

from __future__ import annotations

from flask import Blueprint, jsonify

from square_admin.app.extensions import db
from square_admin.app.middleware.auth_middleware import require_auth
from square_admin.app.services import square_service, timer_service

sqr_timer_bp = Blueprint("sqr_timer", __name__)


@sqr_timer_bp.route("/<int:square_id>/sqr-timer", methods=["GET"])
@require_auth
def list_timers(square_id: int):
    """GET /sqr-square/:squareId/sqr-timer"""
    result = timer_service.list_timers(square_id=square_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@sqr_timer_bp.route("/<int:square_id>/sqr-timer/recreate", methods=["POST"])
@require_auth
def recreate_timers(square_id: int):
    """POST /sqr-square/:squareId/sqr-timer/recreate"""
    square_service.get_square_or_404(square_id, db.session)
    created = timer_service.recreate_timers(square_id=square_id, session=db.session)
    db.session.commit()
    return jsonify({"data": {"created": created}, "warnings": []}), 200


@sqr_timer_bp.route("/<int:square_id>/sqr-timer/set-count/<int:count>", methods=["PATCH"])
@require_auth
def set_all_timer_count(square_id: int, count: int):
    """PATCH /sqr-square/:squareId/sqr-timer/set-count/:count"""
    updated = timer_service.set_timer_count(
        square_id=square_id,
        count=count,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": {"updated": updated}, "warnings": []}), 200


@sqr_timer_bp.route(
    "/<int:square_id>/sqr-timer/<int:timer_id>/set-count/<int:count>",
    methods=["PATCH"],
)
@require_auth
def set_timer_count(square_id: int, timer_id: int, count: int):
    """PATCH /sqr-square/:squareId/sqr-timer/:timerId/set-count/:count"""
    updated = timer_service.set_timer_count(
        square_id=square_id,
        count=count,
        timer_id=timer_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": {"updated": updated}, "warnings": []}), 200
