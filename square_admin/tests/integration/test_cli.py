"""
tests/integration/test_cli.py - The `flask create-user` seed command.

A fresh database has no user to log in with; the command creates one and can
put it into the admin group.
"""

from __future__ import annotations

from .conftest import make_user


def _run(app, *args: str):
    return app.test_cli_runner().invoke(args=["create-user", *args])


def _login(client, name: str, password: str):
    return client.post("/api/v1/auth/login", json={"name": name, "password": password})


def test_created_admin_can_log_in_as_admin(app, client):
    result = _run(app, "root", "--password", "Secret123", "--admin")

    assert result.exit_code == 0, result.output
    assert "Created user" in result.output
    resp = _login(client, "root", "Secret123")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"]["isAdmin"] is True


def test_plain_user_is_not_admin(app, client):
    result = _run(app, "anna", "--password", "Secret123", "--caption", "Anna")

    assert result.exit_code == 0, result.output
    user = _login(client, "anna", "Secret123").get_json()["data"]["user"]
    assert user["isAdmin"] is False
    assert user["caption"] == "Anna"


def test_second_admin_reuses_admin_group(app, client):
    _run(app, "root", "--password", "Secret123", "--admin")
    result = _run(app, "root2", "--password", "Secret123", "--admin")

    assert result.exit_code == 0, result.output
    assert _login(client, "root2", "Secret123").get_json()["data"]["user"]["isAdmin"] is True


def test_taken_name_fails(app):
    make_user(app, "anna")

    result = _run(app, "anna", "--password", "Secret123")

    assert result.exit_code != 0
    assert "already taken" in result.output


def test_weak_password_fails(app):
    result = _run(app, "anna", "--password", "short")

    assert result.exit_code != 0
    assert "password" in result.output
