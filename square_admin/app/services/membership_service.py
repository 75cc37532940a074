"""
services/membership_service.py - Square role grants, team placement and the
derived group-membership cache.

Rules enforced here:
  - Granting a square role also grants the role's authorization group.
  - Revoking reconciles the group cache from the user's REMAINING role grants:
    a group is removed only when no remaining grant (in any square) still
    implies it. Groups that were never implied by the revoked roles are left
    alone, so manually granted groups survive.
  - team_id on a membership row only ever points at a team of the same square.
  - The user named `admin` never appears in membership listings.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility - only flush here, so each
    operation is one transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, contains_eager, joinedload

from square_admin.app.errors import AppError, ErrorCode
from square_admin.app.models.group import AdmUserGroup
from square_admin.app.models.role import SqrRole
from square_admin.app.models.square import SqrTeam
from square_admin.app.models.square_user import SqrSquareUser
from square_admin.app.models.user import AdmUser

logger = logging.getLogger(__name__)

EXCLUDED_USER_NAME = "admin"

# Only these roles take part in team placement.
TEAM_MEMBER_ROLE_NAMES = ("participant", "teamExpert")


# ── Private helpers ────────────────────────────────────────────────────────

def _caption_filter(column, fast_filter: str | None):
    """
    Case-insensitive substring condition, or None when the filter is empty.
    % and _ in the filter match themselves.
    """
    if not fast_filter:
        return None
    return column.icontains(fast_filter, autoescape=True)


def _role_group_ids(role_ids: Iterable[int], session: Session) -> set[int]:
    """Distinct non-null group ids implied by `role_ids`."""
    role_ids = list(role_ids)
    if not role_ids:
        return set()
    rows = session.execute(
        select(SqrRole.group_id).where(
            SqrRole.id.in_(role_ids),
            SqrRole.group_id.is_not(None),
        )
    ).scalars().all()
    return set(rows)


def _build_user_dict(user: AdmUser) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "caption": user.caption,
    }


def _build_team_dict(team: SqrTeam | None) -> dict | None:
    if team is None:
        return None
    return {
        "id": team.id,
        "squareId": team.square_id,
        "name": team.name,
        "caption": team.caption,
        "description": team.description,
    }


def _build_role_dict(role: SqrRole) -> dict:
    return {
        "id": role.id,
        "name": role.name,
        "caption": role.caption,
        "description": role.description,
        "groupId": role.group_id,
    }


def _require_existing(model, ids: list[int], code: str, entity: str, session: Session) -> None:
    """Raises `code` (404) for the first id in `ids` with no `model` row."""
    found = set(session.execute(select(model.id).where(model.id.in_(ids))).scalars().all())
    missing = [entity_id for entity_id in ids if entity_id not in found]
    if missing:
        raise AppError(code, f"{entity} {missing[0]} does not exist.", 404)


def _require_square_teams(square_id: int, team_ids: list[int], session: Session) -> None:
    """Raises TEAM_NOT_FOUND (404) unless every team id belongs to the square."""
    found = set(
        session.execute(
            select(SqrTeam.id).where(
                SqrTeam.square_id == square_id,
                SqrTeam.id.in_(team_ids),
            )
        ).scalars().all()
    )
    missing = [team_id for team_id in team_ids if team_id not in found]
    if missing:
        raise AppError(
            ErrorCode.TEAM_NOT_FOUND,
            f"Team {missing[0]} does not exist in square {square_id}.",
            404,
        )


# ── Group cache ────────────────────────────────────────────────────────────

def reconcile_user_groups(
        user_ids: Iterable[int],
        candidate_group_ids: Iterable[int],
        session: Session,
) -> int:
    """
    Removes cached group memberships that are no longer justified.

    For every user, a group in `candidate_group_ids` is kept if any of the
    user's remaining square-role grants still implies it; otherwise its
    adm_user_group row is deleted. Groups outside `candidate_group_ids` are
    never touched.

    Returns the number of deleted rows.
    """
    user_ids = list(user_ids)
    candidate_group_ids = set(candidate_group_ids)
    if not user_ids or not candidate_group_ids:
        return 0

    still_implied = session.execute(
        select(SqrSquareUser.user_id, SqrRole.group_id)
        .join(SqrRole, SqrRole.id == SqrSquareUser.role_id)
        .where(
            SqrSquareUser.user_id.in_(user_ids),
            SqrRole.group_id.in_(candidate_group_ids),
        )
        .distinct()
    ).all()
    kept = {(row.user_id, row.group_id) for row in still_implied}

    removed = 0
    for user_id in user_ids:
        stale = [g for g in candidate_group_ids if (user_id, g) not in kept]
        if not stale:
            continue
        result = session.execute(
            delete(AdmUserGroup).where(
                AdmUserGroup.user_id == user_id,
                AdmUserGroup.group_id.in_(stale),
            )
        )
        removed += result.rowcount or 0
    session.flush()
    return removed


# ── Role membership ────────────────────────────────────────────────────────

def list_role_members(
        square_id: int,
        role_id: int,
        fast_filter: str | None,
        show_all_users: bool,
        session: Session,
) -> list[dict]:
    """
    Users with a flag telling whether they hold `role_id` in `square_id`.

    show_all_users=False restricts the list to current holders. The admin
    user is always excluded.
    """
    holders = (
        select(SqrSquareUser.user_id)
        .where(
            SqrSquareUser.square_id == square_id,
            SqrSquareUser.role_id == role_id,
        )
    )
    holder_ids = set(session.execute(holders).scalars().all())

    stmt = select(AdmUser).where(AdmUser.name != EXCLUDED_USER_NAME)
    if not show_all_users:
        stmt = stmt.where(AdmUser.id.in_(holders))
    caption_cond = _caption_filter(AdmUser.caption, fast_filter)
    if caption_cond is not None:
        stmt = stmt.where(caption_cond)
    users = session.execute(stmt.order_by(AdmUser.id)).scalars().all()

    return [
        {
            **_build_user_dict(user),
            "activeInSquareRole": user.id in holder_ids,
        }
        for user in users
    ]


def grant_roles(
        square_id: int,
        role_ids: list[int],
        user_ids: list[int],
        session: Session,
) -> int:
    """
    Grants every role in `role_ids` to every user in `user_ids` within the square.

    Pairs that already exist are skipped, so repeating a grant is harmless.
    For each granted role with a group, the group is added to the user's
    cached memberships unless already present.

    Raises:
      AppError(ROLE_NOT_FOUND, 404) - a role id does not exist.
      AppError(USER_NOT_FOUND, 404) - a user id does not exist.

    Returns the number of new membership rows.
    """
    if not role_ids or not user_ids:
        return 0
    _require_existing(SqrRole, role_ids, ErrorCode.ROLE_NOT_FOUND, "Role", session)
    _require_existing(AdmUser, user_ids, ErrorCode.USER_NOT_FOUND, "User", session)

    existing = {
        (row.role_id, row.user_id)
        for row in session.execute(
            select(SqrSquareUser.role_id, SqrSquareUser.user_id).where(
                SqrSquareUser.square_id == square_id,
                SqrSquareUser.role_id.in_(role_ids),
                SqrSquareUser.user_id.in_(user_ids),
            )
        ).all()
    }

    created = 0
    for role_id in role_ids:
        for user_id in user_ids:
            if (role_id, user_id) in existing:
                continue
            session.add(SqrSquareUser(
                user_id=user_id,
                role_id=role_id,
                square_id=square_id,
            ))
            created += 1

    group_ids = _role_group_ids(role_ids, session)
    if group_ids:
        cached = {
            (row.user_id, row.group_id)
            for row in session.execute(
                select(AdmUserGroup.user_id, AdmUserGroup.group_id).where(
                    AdmUserGroup.user_id.in_(user_ids),
                    AdmUserGroup.group_id.in_(group_ids),
                )
            ).all()
        }
        for group_id in group_ids:
            for user_id in user_ids:
                if (user_id, group_id) not in cached:
                    session.add(AdmUserGroup(user_id=user_id, group_id=group_id))

    session.flush()
    logger.info(
        "Granted roles %s to users %s in square %s (%d new rows)",
        role_ids, user_ids, square_id, created,
    )
    return created


def revoke_roles(
        square_id: int,
        role_ids: list[int],
        user_ids: list[int],
        session: Session,
) -> int:
    """
    Removes the (role × user) grants in the square and reconciles the group cache.

    Missing grants are a no-op. Returns the number of deleted membership rows.
    """
    if not role_ids or not user_ids:
        return 0

    result = session.execute(
        delete(SqrSquareUser).where(
            SqrSquareUser.square_id == square_id,
            SqrSquareUser.role_id.in_(role_ids),
            SqrSquareUser.user_id.in_(user_ids),
        )
    )
    session.flush()

    reconcile_user_groups(user_ids, _role_group_ids(role_ids, session), session)
    logger.info(
        "Revoked roles %s from users %s in square %s",
        role_ids, user_ids, square_id,
    )
    return result.rowcount or 0


# ── Team membership ────────────────────────────────────────────────────────

def list_team_members(
        square_id: int,
        team_id: int,
        show_all_users: bool,
        fast_filter: str | None,
        session: Session,
) -> list[dict]:
    """
    Participant and team-expert memberships of the square.

    show_all_users=False restricts the rows to `team_id`; otherwise every
    eligible membership in the square is returned, placed or not.
    activeInSquareRole is true only for rows on `team_id`.
    """
    stmt = (
        select(SqrSquareUser)
        .join(SqrSquareUser.role)
        .join(SqrSquareUser.user)
        .options(
            contains_eager(SqrSquareUser.role),
            contains_eager(SqrSquareUser.user),
            joinedload(SqrSquareUser.team),
        )
        .where(
            SqrSquareUser.square_id == square_id,
            SqrRole.name.in_(TEAM_MEMBER_ROLE_NAMES),
            AdmUser.name != EXCLUDED_USER_NAME,
        )
    )
    if not show_all_users:
        stmt = stmt.where(SqrSquareUser.team_id == team_id)
    caption_cond = _caption_filter(AdmUser.caption, fast_filter)
    if caption_cond is not None:
        stmt = stmt.where(caption_cond)

    rows = session.execute(stmt.order_by(SqrSquareUser.id)).unique().scalars().all()

    return [
        {
            "id": row.id,
            "activeInSquareRole": row.team_id == team_id,
            "team": _build_team_dict(row.team),
            "role": _build_role_dict(row.role),
            "user": _build_user_dict(row.user),
        }
        for row in rows
    ]


def assign_to_teams(
        square_id: int,
        team_ids: list[int],
        square_user_ids: list[int],
        session: Session,
) -> int:
    """
    Places the given membership rows of the square on a team.

    A row can sit on one team only; when several team ids are given the last
    one wins, applied in a single UPDATE.

    Raises:
      AppError(TEAM_NOT_FOUND, 404) - a team id does not belong to the square.

    Returns the number of updated rows.
    """
    if not team_ids or not square_user_ids:
        return 0
    _require_square_teams(square_id, team_ids, session)

    target_team_id = team_ids[-1]
    result = session.execute(
        update(SqrSquareUser)
        .where(
            SqrSquareUser.square_id == square_id,
            SqrSquareUser.id.in_(square_user_ids),
        )
        .values(team_id=target_team_id)
        .execution_options(synchronize_session="fetch")
    )
    session.flush()
    logger.info(
        "Assigned memberships %s of square %s to team %s",
        square_user_ids, square_id, target_team_id,
    )
    return result.rowcount or 0


def unassign_from_teams(
        square_id: int,
        team_ids: list[int],
        square_user_ids: list[int],
        session: Session,
) -> int:
    """
    Clears team_id on the given membership rows whose team is in `team_ids`.

    Rows on other teams are left alone. Returns the number of updated rows.
    """
    if not team_ids or not square_user_ids:
        return 0

    result = session.execute(
        update(SqrSquareUser)
        .where(
            SqrSquareUser.square_id == square_id,
            SqrSquareUser.id.in_(square_user_ids),
            SqrSquareUser.team_id.in_(team_ids),
        )
        .values(team_id=None)
        .execution_options(synchronize_session="fetch")
    )
    session.flush()
    logger.info(
        "Removed memberships %s of square %s from teams %s",
        square_user_ids, square_id, team_ids,
    )
    return result.rowcount or 0
