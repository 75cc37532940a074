"""
tests/unit/test_validation_schemas.py - Unit tests for the marshmallow schemas
and the comma-separated id list parser.

No database and no Flask application context: the schemas inherit from
marshmallow.Schema directly and parse_id_list is a plain function.
Existence checks (SQUARE_NOT_FOUND, ...) belong to the services and are not
tested here.
"""

from __future__ import annotations

import pytest
from marshmallow import ValidationError

from square_admin.app.errors import AppError, ErrorCode
from square_admin.app.schemas.adm_schema import UserGroupQuerySchema, UserSchema
from square_admin.app.schemas.auth_schema import LoginSchema
from square_admin.app.schemas.id_list import parse_id_list
from square_admin.app.schemas.square_schema import (
    MemberQuerySchema,
    RoleSchema,
    SquareSchema,
    TeamSchema,
)


# ═══════════════════════════════════════════════════════════════════════════
# LoginSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestLoginSchema:

    def _load(self, data: dict):
        return LoginSchema().load(data)

    def test_valid_payload(self):
        result = self._load({"name": "anna", "password": "secret"})
        assert result == {"name": "anna", "password": "secret"}

    def test_missing_password_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"name": "anna"})
        assert "password" in exc.value.messages

    def test_empty_name_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"name": "", "password": "secret"})
        assert "name" in exc.value.messages


# ═══════════════════════════════════════════════════════════════════════════
# SquareSchema / TeamSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestSquareSchema:

    def _load(self, data: dict):
        return SquareSchema().load(data)

    def test_name_only_defaults_optional_fields_to_none(self):
        assert self._load({"name": "final"}) == {
            "name": "final",
            "caption": None,
            "description": None,
        }

    def test_unknown_keys_are_dropped(self):
        result = self._load({"id": 5, "name": "final", "teams": []})
        assert "id" not in result
        assert "teams" not in result

    def test_missing_name_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"caption": "Final"})
        assert exc.value.messages["name"] == ["Missing data for required field."]

    def test_whitespace_name_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"name": "   "})
        assert "name" in exc.value.messages

    def test_name_too_long_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"name": "x" * 101})
        assert "name" in exc.value.messages

    def test_caption_too_long_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"name": "final", "caption": "x" * 256})
        assert "caption" in exc.value.messages

    def test_null_caption_is_accepted(self):
        assert self._load({"name": "final", "caption": None})["caption"] is None


class TestTeamSchema:

    def test_square_id_in_body_is_dropped(self):
        result = TeamSchema().load({"name": "red", "squareId": 9})
        assert result == {"name": "red", "caption": None, "description": None}


# ═══════════════════════════════════════════════════════════════════════════
# RoleSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestRoleSchema:

    def _load(self, data: dict):
        return RoleSchema().load(data)

    def test_group_id_uses_camel_case_key(self):
        result = self._load({"name": "judge", "groupId": 3})
        assert result["group_id"] == 3

    def test_group_id_defaults_to_none(self):
        assert self._load({"name": "judge"})["group_id"] is None

    def test_string_group_id_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"name": "judge", "groupId": "3"})
        assert "groupId" in exc.value.messages

    def test_zero_group_id_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"name": "judge", "groupId": 0})
        assert "groupId" in exc.value.messages


# ═══════════════════════════════════════════════════════════════════════════
# MemberQuerySchema
# ═══════════════════════════════════════════════════════════════════════════

class TestMemberQuerySchema:

    def _load(self, data: dict):
        return MemberQuerySchema().load(data)

    def test_defaults(self):
        assert self._load({}) == {"show_all_users": False, "fast_filter": None}

    @pytest.mark.parametrize("raw", ["true", "True", "1"])
    def test_truthy_show_all_users(self, raw):
        assert self._load({"showAllUsers": raw})["show_all_users"] is True

    def test_fast_filter_is_kept_verbatim(self):
        assert self._load({"fastFilter": "An"})["fast_filter"] == "An"

    def test_invalid_boolean_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"showAllUsers": "maybe"})
        assert "showAllUsers" in exc.value.messages


# ═══════════════════════════════════════════════════════════════════════════
# parse_id_list
# ═══════════════════════════════════════════════════════════════════════════

class TestParseIdList:

    def test_single_id(self):
        assert parse_id_list("7") == [7]

    def test_keeps_order_and_drops_duplicates(self):
        assert parse_id_list("3,1,3,2") == [3, 1, 2]

    def test_tolerates_spaces_around_tokens(self):
        assert parse_id_list(" 4 , 5") == [4, 5]

    @pytest.mark.parametrize("raw", ["", "1,,2", "1,", "a", "1,two", "1.5", "-1", "2,-3", "+4"])
    def test_invalid_lists_raise_invalid_id_list(self, raw):
        with pytest.raises(AppError) as exc_info:
            parse_id_list(raw, field="squareIds")

        err = exc_info.value
        assert err.code == ErrorCode.INVALID_ID_LIST
        assert err.http_status == 400
        assert err.field == "squareIds"


# ═══════════════════════════════════════════════════════════════════════════
# UserSchema / UserGroupQuerySchema
# ═══════════════════════════════════════════════════════════════════════════

class TestUserSchema:

    def _load(self, data: dict):
        return UserSchema().load(data)

    def test_password_is_optional(self):
        assert self._load({"name": "anna"}) == {
            "name": "anna",
            "caption": None,
            "password": None,
        }

    def test_valid_password_is_kept(self):
        assert self._load({"name": "anna", "password": "Secret123"})["password"] == "Secret123"

    @pytest.mark.parametrize("password", ["Short1", "onlyletters", "12345678", "x1" * 37])
    def test_weak_or_long_password_raises(self, password):
        with pytest.raises(ValidationError) as exc:
            self._load({"name": "anna", "password": password})
        assert "password" in exc.value.messages

    def test_password_is_never_dumped(self):
        assert "password" not in UserSchema().dump({"name": "anna", "password": "Secret123"})


class TestUserGroupQuerySchema:

    def test_defaults_to_own_groups(self):
        assert UserGroupQuerySchema().load({}) == {"show_all_groups": False}
