"""
schemas/adm_schema.py - Marshmallow schemas for user and group administration.

Uniqueness of user and group names is checked in the services
(DUPLICATE_USER_NAME / DUPLICATE_GROUP_NAME, 409) because it needs a DB query.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates

from square_admin.app.schemas.square_schema import NamedEntitySchema, name_field


class GroupSchema(NamedEntitySchema):
    """POST /adm-group, PUT /adm-group/:id"""


class UserSchema(Schema):
    """
    POST /adm-user, PUT /adm-user/:id

      name     : login name, 1-100 chars, not blank
      caption  : display name used by the member filters
      password : optional; min 8 chars, at least one letter and one digit.
                 Omitted or null on update keeps the current password.
    """

    class Meta:
        unknown = EXCLUDE

    name = name_field()

    caption = fields.Str(
        allow_none=True,
        load_default=None,
        validate=validate.Length(max=255),
    )

    password = fields.Str(
        allow_none=True,
        load_default=None,
        load_only=True,
        # bcrypt only reads the first 72 bytes
        validate=validate.Length(max=72),
    )

    @validates("password")
    def validate_password_strength(self, value: str | None, **kwargs) -> None:
        if value is None:
            return
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")
        if not any(c.isalpha() for c in value):
            raise ValidationError("Password must contain at least one letter.")
        if not any(c.isdigit() for c in value):
            raise ValidationError("Password must contain at least one digit.")


class UserQuerySchema(Schema):
    """Query string of GET /adm-user."""

    class Meta:
        unknown = EXCLUDE

    fast_filter = fields.Str(data_key="fastFilter", load_default=None, allow_none=True)


class UserGroupQuerySchema(Schema):
    """Query string of GET /adm-user/:userId/adm-group."""

    class Meta:
        unknown = EXCLUDE

    show_all_groups = fields.Bool(data_key="showAllGroups", load_default=False)
