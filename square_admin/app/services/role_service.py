"""
services/role_service.py - Global square roles.

Roles are not owned by a square; they are granted per square through
membership_service. A role's group_id names the authorization group the role
implies.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility - only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from square_admin.app.errors import AppError, ErrorCode, not_found
from square_admin.app.models.role import SqrRole
from square_admin.app.models.square_user import SqrSquareUser
from square_admin.app.services import group_service, membership_service

logger = logging.getLogger(__name__)


def _build_role_dict(role: SqrRole) -> dict:
    return {
        "id": role.id,
        "name": role.name,
        "caption": role.caption,
        "description": role.description,
        "groupId": role.group_id,
    }


def _get_role_or_404(role_id: int, session: Session) -> SqrRole:
    role = session.get(SqrRole, role_id)
    if role is None:
        raise not_found(ErrorCode.ROLE_NOT_FOUND, "Role", role_id)
    return role


def _require_unique_name(name: str, session: Session, exclude_id: int | None = None) -> None:
    """Raises DUPLICATE_ROLE_NAME (409) when another role already uses `name`."""
    stmt = select(SqrRole.id).where(SqrRole.name == name)
    if exclude_id is not None:
        stmt = stmt.where(SqrRole.id != exclude_id)
    if session.execute(stmt).first() is not None:
        raise AppError(
            ErrorCode.DUPLICATE_ROLE_NAME,
            f"The role name '{name}' is already taken.",
            409,
            field="name",
        )


def _require_group(group_id: int | None, session: Session) -> None:
    if group_id is not None:
        group_service.get_group_or_404(group_id, session)


def list_roles(session: Session) -> list[dict]:
    stmt = select(SqrRole).order_by(SqrRole.id)
    return [_build_role_dict(r) for r in session.execute(stmt).scalars().all()]


def list_square_roles(square_id: int, session: Session) -> list[dict]:
    """
    Roles that can be granted in a square.

    Every role is global, so the square does not narrow the list.
    """
    return list_roles(session)


def get_role(role_id: int, session: Session) -> dict:
    return _build_role_dict(_get_role_or_404(role_id, session))


def create_role(
        name: str,
        caption: str | None,
        description: str | None,
        group_id: int | None,
        session: Session,
) -> dict:
    """
    Raises:
      AppError(DUPLICATE_ROLE_NAME, 409) - name already taken.
      AppError(GROUP_NOT_FOUND, 404)     - group_id names no group.
    """
    _require_unique_name(name, session)
    _require_group(group_id, session)
    role = SqrRole(
        name=name,
        caption=caption,
        description=description,
        group_id=group_id,
    )
    session.add(role)
    session.flush()
    logger.info("Created role %s (%s)", role.id, name)
    return _build_role_dict(role)


def update_role(
        role_id: int,
        name: str,
        caption: str | None,
        description: str | None,
        group_id: int | None,
        session: Session,
) -> dict:
    """
    Updates a role. Changing its group does not rewrite existing cached
    group memberships; only future grants and revocations use the new group.
    """
    role = _get_role_or_404(role_id, session)
    _require_unique_name(name, session, exclude_id=role_id)
    _require_group(group_id, session)
    role.name = name
    role.caption = caption
    role.description = description
    role.group_id = group_id
    session.flush()
    return _build_role_dict(role)


def delete_roles(role_ids: list[int], session: Session) -> None:
    """
    Deletes roles together with their grants in every square and reconciles
    the group cache of the users who held them. Unknown ids are ignored.
    """
    if not role_ids:
        return

    holders = set(
        session.execute(
            select(SqrSquareUser.user_id).where(SqrSquareUser.role_id.in_(role_ids))
        ).scalars().all()
    )
    group_ids = set(
        session.execute(
            select(SqrRole.group_id).where(
                SqrRole.id.in_(role_ids),
                SqrRole.group_id.is_not(None),
            )
        ).scalars().all()
    )

    session.execute(
        delete(SqrSquareUser)
        .where(SqrSquareUser.role_id.in_(role_ids))
        .execution_options(synchronize_session=False)
    )
    session.execute(
        delete(SqrRole)
        .where(SqrRole.id.in_(role_ids))
        .execution_options(synchronize_session=False)
    )
    session.flush()
    session.expire_all()

    membership_service.reconcile_user_groups(holders, group_ids, session)
    logger.info("Deleted roles %s", role_ids)
