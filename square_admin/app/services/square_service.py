"""
services/square_service.py - Square and team administration.

Visibility rule:
  - Callers with the admin capability list every square; everyone else only
    sees squares where they hold at least one membership row. A caller with no
    memberships gets an empty list, not an error.

Deletion rules:
  - Bulk deletes are no-ops for ids that do not exist.
  - Deleting a square removes its timers, memberships and teams, and
    reconciles the cached group memberships of the affected users.
  - Deleting a team returns its members to the square pool (team_id NULL)
    and removes the team's timer.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility - only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from square_admin.app.errors import ErrorCode, not_found
from square_admin.app.models.role import SqrRole
from square_admin.app.models.square import SqrSquare, SqrTeam
from square_admin.app.models.square_user import SqrSquareUser
from square_admin.app.models.timer import SqrTimer
from square_admin.app.services import membership_service, timer_service

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def _build_square_dict(square: SqrSquare) -> dict:
    return {
        "id": square.id,
        "name": square.name,
        "caption": square.caption,
        "description": square.description,
    }


def _build_team_dict(team: SqrTeam) -> dict:
    return {
        "id": team.id,
        "squareId": team.square_id,
        "name": team.name,
        "caption": team.caption,
        "description": team.description,
    }


def get_square_or_404(square_id: int, session: Session) -> SqrSquare:
    """Returns the SqrSquare or raises SQUARE_NOT_FOUND (404)."""
    square = session.get(SqrSquare, square_id)
    if square is None:
        raise not_found(ErrorCode.SQUARE_NOT_FOUND, "Square", square_id)
    return square


def _get_team_or_404(square_id: int, team_id: int, session: Session) -> SqrTeam:
    """Returns the team when it belongs to the square, else TEAM_NOT_FOUND (404)."""
    team = session.get(SqrTeam, team_id)
    if team is None or team.square_id != square_id:
        raise not_found(ErrorCode.TEAM_NOT_FOUND, "Team", team_id)
    return team


# ── Squares ────────────────────────────────────────────────────────────────

def list_squares(caller_id: int, is_admin: bool, session: Session) -> list[dict]:
    """Squares visible to the caller, ordered by id."""
    stmt = select(SqrSquare).order_by(SqrSquare.id)
    if not is_admin:
        member_of = select(SqrSquareUser.square_id).where(SqrSquareUser.user_id == caller_id)
        stmt = stmt.where(SqrSquare.id.in_(member_of))
    squares = session.execute(stmt).scalars().all()
    return [_build_square_dict(s) for s in squares]


def get_square(square_id: int, session: Session) -> dict:
    return _build_square_dict(get_square_or_404(square_id, session))


def create_square(
        name: str,
        caption: str | None,
        description: str | None,
        session: Session,
) -> dict:
    square = SqrSquare(name=name, caption=caption, description=description)
    session.add(square)
    session.flush()  # populate square.id
    logger.info("Created square %s (%s)", square.id, name)
    return _build_square_dict(square)


def update_square(
        square_id: int,
        name: str,
        caption: str | None,
        description: str | None,
        session: Session,
) -> dict:
    square = get_square_or_404(square_id, session)
    square.name = name
    square.caption = caption
    square.description = description
    session.flush()
    return _build_square_dict(square)


def delete_squares(square_ids: list[int], session: Session) -> None:
    """
    Deletes the squares and everything scoped to them.

    Ids that do not exist are ignored.
    """
    if not square_ids:
        return

    grants = session.execute(
        select(SqrSquareUser.user_id, SqrRole.group_id)
        .join(SqrRole, SqrRole.id == SqrSquareUser.role_id)
        .where(SqrSquareUser.square_id.in_(square_ids))
    ).all()
    affected_users = {row.user_id for row in grants}
    candidate_groups = {row.group_id for row in grants if row.group_id is not None}

    timer_service.delete_timers(session, SqrTimer.square_id.in_(square_ids))
    session.execute(
        delete(SqrSquareUser)
        .where(SqrSquareUser.square_id.in_(square_ids))
        .execution_options(synchronize_session=False)
    )
    session.execute(
        delete(SqrTeam)
        .where(SqrTeam.square_id.in_(square_ids))
        .execution_options(synchronize_session=False)
    )
    result = session.execute(
        delete(SqrSquare)
        .where(SqrSquare.id.in_(square_ids))
        .execution_options(synchronize_session=False)
    )
    session.flush()
    session.expire_all()

    membership_service.reconcile_user_groups(affected_users, candidate_groups, session)
    logger.info("Deleted squares %s (%d rows)", square_ids, result.rowcount or 0)


# ── Teams ──────────────────────────────────────────────────────────────────

def list_teams(square_id: int, session: Session) -> list[dict]:
    """Teams of the square, ordered by id."""
    get_square_or_404(square_id, session)
    stmt = select(SqrTeam).where(SqrTeam.square_id == square_id).order_by(SqrTeam.id)
    return [_build_team_dict(t) for t in session.execute(stmt).scalars().all()]


def get_team(square_id: int, team_id: int, session: Session) -> dict:
    return _build_team_dict(_get_team_or_404(square_id, team_id, session))


def create_team(
        square_id: int,
        name: str,
        caption: str | None,
        description: str | None,
        session: Session,
) -> dict:
    get_square_or_404(square_id, session)
    team = SqrTeam(
        square_id=square_id,
        name=name,
        caption=caption,
        description=description,
    )
    session.add(team)
    session.flush()
    logger.info("Created team %s in square %s", team.id, square_id)
    return _build_team_dict(team)


def update_team(
        square_id: int,
        team_id: int,
        name: str,
        caption: str | None,
        description: str | None,
        session: Session,
) -> dict:
    team = _get_team_or_404(square_id, team_id, session)
    team.name = name
    team.caption = caption
    team.description = description
    session.flush()
    return _build_team_dict(team)


def delete_teams(square_id: int, team_ids: list[int], session: Session) -> None:
    """
    Deletes the square's teams in `team_ids`.

    Teams of other squares and unknown ids are ignored.
    """
    if not team_ids:
        return

    owned = select(SqrTeam.id).where(
        SqrTeam.square_id == square_id,
        SqrTeam.id.in_(team_ids),
    )
    session.execute(
        update(SqrSquareUser)
        .where(SqrSquareUser.team_id.in_(owned))
        .values(team_id=None)
        .execution_options(synchronize_session=False)
    )
    timer_service.delete_timers(
        session,
        SqrTimer.square_id == square_id,
        SqrTimer.team_id.in_(team_ids),
    )
    session.execute(
        delete(SqrTeam)
        .where(
            SqrTeam.square_id == square_id,
            SqrTeam.id.in_(team_ids),
        )
        .execution_options(synchronize_session=False)
    )
    session.flush()
    session.expire_all()
    logger.info("Deleted teams %s of square %s", team_ids, square_id)
