"""
services/user_service.py - User administration and manual group membership.

Responsibilities:
  - User CRUD; passwords are stored only as bcrypt hashes
  - Listing, adding and removing a user's adm_user_group rows by hand

Groups added here are not implied by any square role, so revoking square
roles never removes them (see membership_service.reconcile_user_groups),
unless a revoked role implies the same group.

Layer rules:
  - No imports from routes or schemas
  - current_app.config is read ONLY for BCRYPT_LOG_ROUNDS
  - Commits are the route's responsibility - only flush here.
"""

from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from square_admin.app.errors import AppError, ErrorCode, not_found
from square_admin.app.models.group import AdmGroup, AdmUserGroup
from square_admin.app.models.square_user import SqrSquareUser
from square_admin.app.models.user import AdmUser
from square_admin.app.services import group_service
from square_admin.app.services.auth_service import hash_password

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def _build_user_dict(user: AdmUser) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "caption": user.caption,
        "hasPassword": bool(user.password_hash),
    }


def _hash(password: str) -> str:
    return hash_password(password, rounds=current_app.config.get("BCRYPT_LOG_ROUNDS", 12))


def _require_unique_name(name: str, session: Session, exclude_id: int | None = None) -> None:
    """Raises DUPLICATE_USER_NAME (409) when another user already uses `name`."""
    stmt = select(AdmUser.id).where(AdmUser.name == name)
    if exclude_id is not None:
        stmt = stmt.where(AdmUser.id != exclude_id)
    if session.execute(stmt).first() is not None:
        raise AppError(
            ErrorCode.DUPLICATE_USER_NAME,
            f"The user name '{name}' is already taken.",
            409,
            field="name",
        )


def get_user_or_404(user_id: int, session: Session) -> AdmUser:
    user = session.get(AdmUser, user_id)
    if user is None:
        raise not_found(ErrorCode.USER_NOT_FOUND, "User", user_id)
    return user


# ── Users ──────────────────────────────────────────────────────────────────

def list_users(fast_filter: str | None, session: Session) -> list[dict]:
    """All users ordered by id; fast_filter matches name or caption, ignoring case."""
    stmt = select(AdmUser).order_by(AdmUser.id)
    if fast_filter:
        stmt = stmt.where(or_(
            AdmUser.name.icontains(fast_filter, autoescape=True),
            AdmUser.caption.icontains(fast_filter, autoescape=True),
        ))
    return [_build_user_dict(u) for u in session.execute(stmt).scalars().all()]


def get_user(user_id: int, session: Session) -> dict:
    return _build_user_dict(get_user_or_404(user_id, session))


def create_user(
        name: str,
        caption: str | None,
        password: str | None,
        session: Session,
) -> dict:
    """
    Creates a user. A user without a password exists for listings and
    grants but cannot log in.

    Raises:
      AppError(DUPLICATE_USER_NAME, 409) - name already taken.
    """
    _require_unique_name(name, session)
    user = AdmUser(
        name=name,
        caption=caption,
        password_hash=_hash(password) if password else None,
    )
    session.add(user)
    session.flush()
    logger.info("Created user %s (%s)", user.id, name)
    return _build_user_dict(user)


def update_user(
        user_id: int,
        name: str,
        caption: str | None,
        password: str | None,
        session: Session,
) -> dict:
    """Updates name and caption. password=None keeps the current password."""
    user = get_user_or_404(user_id, session)
    _require_unique_name(name, session, exclude_id=user_id)
    user.name = name
    user.caption = caption
    if password:
        user.password_hash = _hash(password)
    session.flush()
    return _build_user_dict(user)


def delete_users(user_ids: list[int], session: Session) -> None:
    """Deletes users with their square grants and group rows. Unknown ids are ignored."""
    if not user_ids:
        return

    for model in (SqrSquareUser, AdmUserGroup):
        session.execute(
            delete(model)
            .where(model.user_id.in_(user_ids))
            .execution_options(synchronize_session=False)
        )
    session.execute(
        delete(AdmUser)
        .where(AdmUser.id.in_(user_ids))
        .execution_options(synchronize_session=False)
    )
    session.flush()
    session.expire_all()
    logger.info("Deleted users %s", user_ids)


# ── Group membership ───────────────────────────────────────────────────────

def list_user_groups(user_id: int, show_all_groups: bool, session: Session) -> list[dict]:
    """
    Groups of a user, each flagged with activeInUser.

    show_all_groups=True also lists the groups the user is not in.
    """
    get_user_or_404(user_id, session)
    member_of = set(
        session.execute(
            select(AdmUserGroup.group_id).where(AdmUserGroup.user_id == user_id)
        ).scalars().all()
    )

    stmt = select(AdmGroup).order_by(AdmGroup.id)
    if not show_all_groups:
        stmt = stmt.where(AdmGroup.id.in_(member_of))
    return [
        {
            "id": group.id,
            "name": group.name,
            "caption": group.caption,
            "activeInUser": group.id in member_of,
        }
        for group in session.execute(stmt).scalars().all()
    ]


def add_user_groups(user_id: int, group_ids: list[int], session: Session) -> int:
    """
    Adds the user to every group. Existing memberships are skipped.
    Returns the number of rows created.

    Raises:
      AppError(USER_NOT_FOUND, 404)
      AppError(GROUP_NOT_FOUND, 404) - first unknown group id; nothing is added.
    """
    get_user_or_404(user_id, session)
    for group_id in group_ids:
        group_service.get_group_or_404(group_id, session)

    existing = set(
        session.execute(
            select(AdmUserGroup.group_id).where(
                AdmUserGroup.user_id == user_id,
                AdmUserGroup.group_id.in_(group_ids),
            )
        ).scalars().all()
    )
    created = 0
    for group_id in group_ids:
        if group_id not in existing:
            session.add(AdmUserGroup(user_id=user_id, group_id=group_id))
            created += 1
    session.flush()
    return created


def remove_user_groups(user_id: int, group_ids: list[int], session: Session) -> int:
    """Removes the user from the groups and returns the number of rows deleted."""
    result = session.execute(
        delete(AdmUserGroup)
        .where(
            AdmUserGroup.user_id == user_id,
            AdmUserGroup.group_id.in_(group_ids),
        )
        .execution_options(synchronize_session=False)
    )
    session.flush()
    return result.rowcount or 0
