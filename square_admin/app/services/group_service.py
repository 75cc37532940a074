"""
services/group_service.py - Authorization group administration.

Groups are referenced by square roles (sqr_role.group_id) and cached per user
in adm_user_group. Deleting a group detaches it from its roles and drops the
cached memberships; the roles themselves survive.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility - only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from square_admin.app.errors import AppError, ErrorCode, not_found
from square_admin.app.models.group import AdmGroup, AdmUserGroup
from square_admin.app.models.role import SqrRole

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def _build_group_dict(group: AdmGroup) -> dict:
    return {
        "id": group.id,
        "name": group.name,
        "caption": group.caption,
        "description": group.description,
    }


def _require_unique_name(name: str, session: Session, exclude_id: int | None = None) -> None:
    """Raises DUPLICATE_GROUP_NAME (409) when another group already uses `name`."""
    stmt = select(AdmGroup.id).where(AdmGroup.name == name)
    if exclude_id is not None:
        stmt = stmt.where(AdmGroup.id != exclude_id)
    if session.execute(stmt).first() is not None:
        raise AppError(
            ErrorCode.DUPLICATE_GROUP_NAME,
            f"The group name '{name}' is already taken.",
            409,
            field="name",
        )


def get_group_or_404(group_id: int, session: Session) -> AdmGroup:
    """Returns the AdmGroup or raises GROUP_NOT_FOUND (404)."""
    group = session.get(AdmGroup, group_id)
    if group is None:
        raise not_found(ErrorCode.GROUP_NOT_FOUND, "Group", group_id)
    return group


# ── Public service functions ───────────────────────────────────────────────

def list_groups(session: Session) -> list[dict]:
    stmt = select(AdmGroup).order_by(AdmGroup.id)
    return [_build_group_dict(g) for g in session.execute(stmt).scalars().all()]


def get_group(group_id: int, session: Session) -> dict:
    return _build_group_dict(get_group_or_404(group_id, session))


def create_group(
        name: str,
        caption: str | None,
        description: str | None,
        session: Session,
) -> dict:
    """
    Raises:
      AppError(DUPLICATE_GROUP_NAME, 409) - name already in use.
    """
    _require_unique_name(name, session)
    group = AdmGroup(name=name, caption=caption, description=description)
    session.add(group)
    session.flush()
    logger.info("Created group %s (%s)", group.id, name)
    return _build_group_dict(group)


def update_group(
        group_id: int,
        name: str,
        caption: str | None,
        description: str | None,
        session: Session,
) -> dict:
    group = get_group_or_404(group_id, session)
    _require_unique_name(name, session, exclude_id=group_id)
    group.name = name
    group.caption = caption
    group.description = description
    session.flush()
    return _build_group_dict(group)


def get_or_create_group(name: str, session: Session) -> AdmGroup:
    """Returns the group called `name`, creating it without caption when missing."""
    group = session.execute(
        select(AdmGroup).where(AdmGroup.name == name)
    ).scalar_one_or_none()
    if group is None:
        group = AdmGroup(name=name)
        session.add(group)
        session.flush()
        logger.info("Created group %s (%s)", group.id, name)
    return group


def delete_groups(group_ids: list[int], session: Session) -> None:
    """
    Deletes groups. Roles implying them keep existing with group_id NULL and
    every cached membership of the groups is removed. Unknown ids are ignored.
    """
    if not group_ids:
        return

    session.execute(
        update(SqrRole)
        .where(SqrRole.group_id.in_(group_ids))
        .values(group_id=None)
        .execution_options(synchronize_session=False)
    )
    session.execute(
        delete(AdmUserGroup)
        .where(AdmUserGroup.group_id.in_(group_ids))
        .execution_options(synchronize_session=False)
    )
    session.execute(
        delete(AdmGroup)
        .where(AdmGroup.id.in_(group_ids))
        .execution_options(synchronize_session=False)
    )
    session.flush()
    session.expire_all()
    logger.info("Deleted groups %s", group_ids)
