"""
schemas/square_schema.py - Marshmallow schemas for square, team and role bodies
and for the member-listing query string.

Validation responsibility:
  - This file: field types, string lengths, non-empty checks (including trim).
  - services/: existence checks (SQUARE_NOT_FOUND, TEAM_NOT_FOUND, ...) that
    require a DB lookup.

Unknown keys are ignored so the client can send back a whole transfer object
(including its `id`) on update.

IMPORTANT: Inherits from marshmallow.Schema directly - never a Flask-bound
schema class.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate


def _validate_non_empty_after_trim(value: str) -> None:
    """
    Raises ValidationError if the string is blank or contains only whitespace.
    Mirrors the DB CHECK(LENGTH(TRIM(name)) > 0) rule at the API layer.
    """
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


def name_field() -> fields.Str:
    return fields.Str(
        required=True,
        validate=[
            validate.Length(
                min=1,
                max=100,
                error="Name must be between 1 and 100 characters.",
            ),
            _validate_non_empty_after_trim,
        ],
    )


class NamedEntitySchema(Schema):
    """Shared name/caption/description shape of squares, teams and roles."""

    class Meta:
        unknown = EXCLUDE

    name = name_field()

    caption = fields.Str(
        allow_none=True,
        load_default=None,
        validate=validate.Length(max=255),
    )

    description = fields.Str(
        allow_none=True,
        load_default=None,
        validate=validate.Length(max=1000),
    )


class SquareSchema(NamedEntitySchema):
    """POST /sqr-square, PUT /sqr-square/:id"""


class TeamSchema(NamedEntitySchema):
    """
    POST /sqr-square/:squareId/sqr-team, PUT .../sqr-team/:teamId

    The owning square always comes from the URL; a squareId in the body is
    ignored.
    """


class RoleSchema(NamedEntitySchema):
    """POST /sqr-role, PUT /sqr-role/:id"""

    group_id = fields.Int(
        data_key="groupId",
        strict=True,
        allow_none=True,
        load_default=None,
        validate=validate.Range(min=1, error="groupId must be a positive integer."),
    )


class MemberQuerySchema(Schema):
    """
    Query string of GET .../sqr-role/:roleId/user and GET .../sqr-team/:teamId/user.

      showAllUsers : "true"/"false" (default false)
      fastFilter   : optional caption substring; empty means no filter
    """

    class Meta:
        unknown = EXCLUDE

    show_all_users = fields.Bool(data_key="showAllUsers", load_default=False)
    fast_filter = fields.Str(data_key="fastFilter", load_default=None, allow_none=True)
