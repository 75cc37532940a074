"""
tests/integration/conftest.py - Fixtures and helpers for all integration tests.

Design:
  - The app is created once per session using create_app("testing"). Unless
    TEST_DATABASE_URL points at a real database, that is in-memory SQLite.
  - All tables are created once via db.create_all() at session start.
  - Between tests, all rows are deleted in FK-safe order so tests are isolated.

Helper functions (not fixtures) are provided for common operations:
  - make_user(app, ...)          → user id (password hashed with bcrypt)
  - make_group(app, ...)         → group id
  - add_user_to_group(app, ...)  → adm_user_group row
  - make_role(app, ...)          → role id
  - user_group_ids(app, user_id) → set of cached group ids
  - token_for(app, user_id)      → signed access token
  - auth_headers(token)          → {"Authorization": "Bearer <token>"}
  - admin_headers(app)           → headers of a fresh member of the admin group
  - make_square / make_team      → transfer dicts created through the API

Users, groups and roles are inserted directly through the ORM inside an app
context, so setup does not depend on the endpoints under test.
"""

from __future__ import annotations

import pytest
from sqlalchemy import select, text

from square_admin.app import create_app
from square_admin.app.extensions import db as _db
from square_admin.app.models.group import AdmGroup, AdmUserGroup
from square_admin.app.models.role import SqrRole
from square_admin.app.models.user import AdmUser
from square_admin.app.services.auth_service import (
    ADMIN_GROUP_NAME,
    create_access_token,
    hash_password,
)

DEFAULT_PASSWORD = "Password1"

_TABLES_IN_DELETE_ORDER = (
    "sqr_timer_detail",
    "sqr_timer",
    "sqr_square_user",
    "sqr_team",
    "sqr_square",
    "sqr_role",
    "adm_user_group",
    "adm_group",
    "adm_user",
)


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """Creates the Flask application in 'testing' mode once for the session."""
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """Deletes all rows after every test, children before parents."""
    yield

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test

        with _db.engine.connect() as conn:
            for table in _TABLES_IN_DELETE_ORDER:
                conn.execute(text(f"DELETE FROM {table}"))
            conn.commit()


# ═══════════════════════════════════════════════════════════════════════════
# Client fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def make_user(
    app,
    name: str,
    caption: str | None = None,
    password: str | None = DEFAULT_PASSWORD,
) -> int:
    with app.app_context():
        user = AdmUser(
            name=name,
            caption=caption if caption is not None else name.capitalize(),
            password_hash=hash_password(password, rounds=4) if password else None,
        )
        _db.session.add(user)
        _db.session.commit()
        return user.id


def make_group(app, name: str) -> int:
    with app.app_context():
        group = AdmGroup(name=name, caption=name.capitalize())
        _db.session.add(group)
        _db.session.commit()
        return group.id


def add_user_to_group(app, user_id: int, group_id: int) -> None:
    with app.app_context():
        _db.session.add(AdmUserGroup(user_id=user_id, group_id=group_id))
        _db.session.commit()


def make_role(app, name: str, group_id: int | None = None) -> int:
    with app.app_context():
        role = SqrRole(name=name, caption=name.capitalize(), group_id=group_id)
        _db.session.add(role)
        _db.session.commit()
        return role.id


def user_group_ids(app, user_id: int) -> set[int]:
    """Group ids currently cached for the user in adm_user_group."""
    with app.app_context():
        rows = _db.session.execute(
            select(AdmUserGroup.group_id).where(AdmUserGroup.user_id == user_id)
        ).scalars().all()
        return set(rows)


def token_for(app, user_id: int) -> str:
    with app.app_context():
        return create_access_token(user_id)


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def admin_headers(app, name: str = "admin") -> dict:
    """
    Creates a user in the admin group and returns its auth headers.
    The group is created on first use.
    """
    with app.app_context():
        group_id = _db.session.execute(
            select(AdmGroup.id).where(AdmGroup.name == ADMIN_GROUP_NAME)
        ).scalar_one_or_none()
    if group_id is None:
        group_id = make_group(app, ADMIN_GROUP_NAME)
    user_id = make_user(app, name)
    add_user_to_group(app, user_id, group_id)
    return auth_headers(token_for(app, user_id))


def make_square(client, headers: dict, name: str = "Final", caption: str | None = None) -> dict:
    resp = client.post(
        "/api/v1/sqr-square",
        json={"name": name, "caption": caption or name},
        headers=headers,
    )
    assert resp.status_code == 201, f"make_square failed: {resp.get_json()}"
    return resp.get_json()["data"]


def make_team(
    client,
    headers: dict,
    square_id: int,
    name: str,
    caption: str | None = None,
) -> dict:
    resp = client.post(
        f"/api/v1/sqr-square/{square_id}/sqr-team",
        json={"name": name, "caption": caption},
        headers=headers,
    )
    assert resp.status_code == 201, f"make_team failed: {resp.get_json()}"
    return resp.get_json()["data"]


def grant(client, headers: dict, square_id: int, role_ids, user_ids):
    """POSTs a role grant and returns the HTTP response."""
    roles = ",".join(str(r) for r in role_ids)
    users = ",".join(str(u) for u in user_ids)
    return client.post(
        f"/api/v1/sqr-square/{square_id}/sqr-role/{roles}/user/{users}",
        headers=headers,
    )


def revoke(client, headers: dict, square_id: int, role_ids, user_ids):
    """DELETEs a role grant and returns the HTTP response."""
    roles = ",".join(str(r) for r in role_ids)
    users = ",".join(str(u) for u in user_ids)
    return client.delete(
        f"/api/v1/sqr-square/{square_id}/sqr-role/{roles}/user/{users}",
        headers=headers,
    )
