"""
tests/integration/test_users.py - Integration tests for user administration.

Endpoints covered:
  GET    /adm-user                              → 200  (?fastFilter)
  POST   /adm-user                              → 201 / 400 / 409 DUPLICATE_USER_NAME
  GET    /adm-user/:id                          → 200 / 404 USER_NOT_FOUND
  PUT    /adm-user/:id                          → 200 / 409
  DELETE /adm-user/:ids                         → 200  (grants and groups removed)
  GET    /adm-user/:userId/adm-group            → 200
  POST   /adm-user/:userId/adm-group/:groupIds  → 201 / 404 GROUP_NOT_FOUND
  DELETE /adm-user/:userId/adm-group/:groupIds  → 200
"""

from __future__ import annotations

import pytest

from .conftest import (
    add_user_to_group,
    admin_headers,
    grant,
    make_group,
    make_role,
    make_square,
    make_user,
    revoke,
    user_group_ids,
)


@pytest.fixture
def headers(app):
    return admin_headers(app)


def _login(client, name: str, password: str):
    return client.post("/api/v1/auth/login", json={"name": name, "password": password})


class TestUserCrud:

    def test_created_user_can_log_in(self, client, headers):
        resp = client.post(
            "/api/v1/adm-user",
            json={"name": "anna", "caption": "Anna", "password": "Secret123"},
            headers=headers,
        )

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["name"] == "anna"
        assert data["hasPassword"] is True
        assert "password" not in data
        assert _login(client, "anna", "Secret123").status_code == 200

    def test_user_without_password_cannot_log_in(self, client, headers):
        resp = client.post("/api/v1/adm-user", json={"name": "anna"}, headers=headers)

        assert resp.status_code == 201
        assert resp.get_json()["data"]["hasPassword"] is False
        assert _login(client, "anna", "Secret123").status_code == 401

    def test_weak_password_returns_400(self, client, headers):
        resp = client.post(
            "/api/v1/adm-user", json={"name": "anna", "password": "short"}, headers=headers,
        )

        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "password"

    def test_duplicate_name_returns_409(self, app, client, headers):
        make_user(app, "anna")

        resp = client.post("/api/v1/adm-user", json={"name": "anna"}, headers=headers)

        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "DUPLICATE_USER_NAME"

    def test_update_without_password_keeps_it(self, app, client, headers):
        anna = make_user(app, "anna", password="Secret123")

        resp = client.put(
            f"/api/v1/adm-user/{anna}",
            json={"name": "anna", "caption": "Anna K."},
            headers=headers,
        )

        assert resp.status_code == 200
        assert resp.get_json()["data"]["caption"] == "Anna K."
        assert _login(client, "anna", "Secret123").status_code == 200

    def test_update_with_password_replaces_it(self, app, client, headers):
        anna = make_user(app, "anna", password="Secret123")

        client.put(
            f"/api/v1/adm-user/{anna}",
            json={"name": "anna", "password": "Changed99"},
            headers=headers,
        )

        assert _login(client, "anna", "Secret123").status_code == 401
        assert _login(client, "anna", "Changed99").status_code == 200

    def test_rename_onto_existing_name_returns_409(self, app, client, headers):
        make_user(app, "anna")
        bob = make_user(app, "bob")

        resp = client.put(f"/api/v1/adm-user/{bob}", json={"name": "anna"}, headers=headers)

        assert resp.status_code == 409

    def test_get_missing_user_returns_404(self, client, headers):
        resp = client.get("/api/v1/adm-user/999999", headers=headers)

        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "USER_NOT_FOUND"


class TestUserList:

    def test_fast_filter_matches_name_or_caption(self, app, client, headers):
        make_user(app, "anna", caption="Anna")
        make_user(app, "bob", caption="Robert")
        make_user(app, "carl", caption="Carl")

        resp = client.get(
            "/api/v1/adm-user", query_string={"fastFilter": "ROB"}, headers=headers,
        )

        assert [u["name"] for u in resp.get_json()["data"]] == ["bob"]

    def test_like_wildcards_match_literally(self, app, client, headers):
        make_user(app, "anna")

        resp = client.get(
            "/api/v1/adm-user", query_string={"fastFilter": "%"}, headers=headers,
        )

        assert resp.get_json()["data"] == []


class TestUserDelete:

    def test_delete_removes_grants_and_groups(self, app, client, headers):
        square = make_square(client, headers, "final")
        group_id = make_group(app, "participants")
        role_id = make_role(app, "participant", group_id=group_id)
        anna = make_user(app, "anna")
        grant(client, headers, square["id"], [role_id], [anna])

        resp = client.delete(f"/api/v1/adm-user/{anna}", headers=headers)

        assert resp.status_code == 200
        assert resp.get_json()["data"] == {"deleted": [anna]}
        assert client.get(f"/api/v1/adm-user/{anna}", headers=headers).status_code == 404
        assert user_group_ids(app, anna) == set()
        members = client.get(
            f"/api/v1/sqr-square/{square['id']}/sqr-role/{role_id}/user",
            headers=headers,
        ).get_json()["data"]
        assert members == []

    def test_negative_id_returns_400(self, client, headers):
        resp = client.delete("/api/v1/adm-user/-1", headers=headers)

        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "INVALID_ID_LIST"


class TestUserGroups:

    def test_add_and_list_groups(self, app, client, headers):
        anna = make_user(app, "anna")
        staff = make_group(app, "staff")
        judges = make_group(app, "judges")

        resp = client.post(f"/api/v1/adm-user/{anna}/adm-group/{staff}", headers=headers)
        mine = client.get(f"/api/v1/adm-user/{anna}/adm-group", headers=headers)
        every = client.get(
            f"/api/v1/adm-user/{anna}/adm-group",
            query_string={"showAllGroups": "true"},
            headers=headers,
        )

        assert resp.status_code == 201
        assert resp.get_json()["data"] == {"created": 1}
        assert [g["id"] for g in mine.get_json()["data"]] == [staff]
        flags = {g["id"]: g["activeInUser"] for g in every.get_json()["data"]}
        assert flags[staff] is True
        assert flags[judges] is False

    def test_adding_twice_creates_one_row(self, app, client, headers):
        anna = make_user(app, "anna")
        staff = make_group(app, "staff")

        client.post(f"/api/v1/adm-user/{anna}/adm-group/{staff}", headers=headers)
        resp = client.post(f"/api/v1/adm-user/{anna}/adm-group/{staff}", headers=headers)

        assert resp.get_json()["data"] == {"created": 0}
        assert user_group_ids(app, anna) == {staff}

    def test_unknown_group_returns_404_and_adds_nothing(self, app, client, headers):
        anna = make_user(app, "anna")
        staff = make_group(app, "staff")

        resp = client.post(
            f"/api/v1/adm-user/{anna}/adm-group/{staff},424242", headers=headers,
        )

        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "GROUP_NOT_FOUND"
        assert user_group_ids(app, anna) == set()

    def test_remove_group(self, app, client, headers):
        anna = make_user(app, "anna")
        staff = make_group(app, "staff")
        add_user_to_group(app, anna, staff)

        resp = client.delete(f"/api/v1/adm-user/{anna}/adm-group/{staff}", headers=headers)

        assert resp.status_code == 200
        assert resp.get_json()["data"] == {"removed": 1}
        assert user_group_ids(app, anna) == set()

    def test_manual_group_survives_revoke_of_unrelated_role(self, app, client, headers):
        square = make_square(client, headers, "final")
        role_id = make_role(app, "participant", group_id=make_group(app, "participants"))
        anna = make_user(app, "anna")
        staff = make_group(app, "staff")
        client.post(f"/api/v1/adm-user/{anna}/adm-group/{staff}", headers=headers)
        grant(client, headers, square["id"], [role_id], [anna])

        revoke(client, headers, square["id"], [role_id], [anna])

        assert user_group_ids(app, anna) == {staff}
