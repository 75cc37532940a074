"""Initial schema - authorization tables, squares, teams, memberships, timers.

Revision: 001_initial_schema
Created:  2026-10-19

Append-only: never edit this file after it has been applied to a database.
Schema changes go into a NEW migration file.

Creation order (FK dependency order):
  adm_group → adm_user → adm_user_group → sqr_role → sqr_square → sqr_team
  → sqr_square_user → sqr_timer → sqr_timer_detail

ON DELETE policies:
  adm_user_group.*            → CASCADE
  sqr_role.group_id           → SET NULL
  sqr_team.square_id          → CASCADE
  sqr_square_user.team_id     → SET NULL   (member returns to the square pool)
  sqr_square_user.* (others)  → CASCADE
  sqr_timer.*                 → CASCADE
  sqr_timer_detail.timer_id   → CASCADE
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# ── Alembic revision identifiers ──────────────────────────────────────────
revision: str = "001_initial_schema"
down_revision: str | None = None      # first migration - no parent
branch_labels: tuple | None = None
depends_on: tuple | None = None

_TIMER_STATES = ("READY", "RUNNING", "PAUSED", "STOPPED")


def _id_column(name: str = "id", *args, **kwargs) -> sa.Column:
    return sa.Column(name, sa.BigInteger(), *args, **kwargs)


def _state_column() -> sa.Column:
    # Non-native enum: VARCHAR(16) + CHECK, same as the model definition.
    return sa.Column(
        "state",
        sa.Enum(*_TIMER_STATES, name="sqr_timer_state", native_enum=False, length=16,
                create_constraint=True),
        nullable=False,
    )


def upgrade() -> None:

    op.create_table(
        "adm_group",
        _id_column(nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("caption", sa.String(255)),
        sa.Column("description", sa.String(1000)),
        sa.PrimaryKeyConstraint("id", name="pk_adm_group"),
        sa.UniqueConstraint("name", name="uq_adm_group_name"),
    )

    op.create_table(
        "adm_user",
        _id_column(nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("caption", sa.String(255)),
        sa.Column("password_hash", sa.String(255)),
        sa.PrimaryKeyConstraint("id", name="pk_adm_user"),
        sa.UniqueConstraint("name", name="uq_adm_user_name"),
        sa.CheckConstraint(
            "LENGTH(TRIM(name)) > 0",
            name="ck_adm_user_name_nonempty",
        ),
    )

    op.create_table(
        "adm_user_group",
        _id_column(nullable=False),
        _id_column(
            "user_id",
            sa.ForeignKey("adm_user.id", ondelete="CASCADE", name="fk_adm_user_group_user"),
            nullable=False,
        ),
        _id_column(
            "group_id",
            sa.ForeignKey("adm_group.id", ondelete="CASCADE", name="fk_adm_user_group_group"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_adm_user_group"),
        sa.UniqueConstraint("user_id", "group_id", name="uq_adm_user_group_user_group"),
    )

    op.create_table(
        "sqr_role",
        _id_column(nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("caption", sa.String(255)),
        sa.Column("description", sa.String(1000)),
        _id_column(
            "group_id",
            sa.ForeignKey("adm_group.id", ondelete="SET NULL", name="fk_sqr_role_group"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_sqr_role"),
        sa.UniqueConstraint("name", name="uq_sqr_role_name"),
    )

    op.create_table(
        "sqr_square",
        _id_column(nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("caption", sa.String(255)),
        sa.Column("description", sa.String(1000)),
        sa.PrimaryKeyConstraint("id", name="pk_sqr_square"),
    )

    op.create_table(
        "sqr_team",
        _id_column(nullable=False),
        _id_column(
            "square_id",
            sa.ForeignKey("sqr_square.id", ondelete="CASCADE", name="fk_sqr_team_square"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("caption", sa.String(255)),
        sa.Column("description", sa.String(1000)),
        sa.PrimaryKeyConstraint("id", name="pk_sqr_team"),
    )

    op.create_table(
        "sqr_square_user",
        _id_column(nullable=False),
        _id_column(
            "user_id",
            sa.ForeignKey("adm_user.id", ondelete="CASCADE", name="fk_sqr_square_user_user"),
            nullable=False,
        ),
        _id_column(
            "role_id",
            sa.ForeignKey("sqr_role.id", ondelete="CASCADE", name="fk_sqr_square_user_role"),
            nullable=False,
        ),
        _id_column(
            "square_id",
            sa.ForeignKey("sqr_square.id", ondelete="CASCADE", name="fk_sqr_square_user_square"),
            nullable=False,
        ),
        _id_column(
            "team_id",
            sa.ForeignKey("sqr_team.id", ondelete="SET NULL", name="fk_sqr_square_user_team"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_sqr_square_user"),
        sa.UniqueConstraint(
            "user_id", "role_id", "square_id",
            name="uq_sqr_square_user_user_role_square",
        ),
    )

    op.create_table(
        "sqr_timer",
        _id_column(nullable=False),
        _id_column(
            "square_id",
            sa.ForeignKey("sqr_square.id", ondelete="CASCADE", name="fk_sqr_timer_square"),
            nullable=False,
        ),
        _id_column(
            "team_id",
            sa.ForeignKey("sqr_team.id", ondelete="CASCADE", name="fk_sqr_timer_team"),
            nullable=False,
        ),
        sa.Column("caption", sa.String(255)),
        _state_column(),
        sa.Column("count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("begin_time", sa.DateTime(timezone=True)),
        sa.Column("pause_time", sa.DateTime(timezone=True)),
        sa.Column("continue_time", sa.DateTime(timezone=True)),
        sa.Column("stop_time", sa.DateTime(timezone=True)),
        sa.PrimaryKeyConstraint("id", name="pk_sqr_timer"),
    )

    op.create_table(
        "sqr_timer_detail",
        _id_column(nullable=False),
        _id_column(
            "timer_id",
            sa.ForeignKey("sqr_timer.id", ondelete="CASCADE", name="fk_sqr_timer_detail_timer"),
            nullable=False,
        ),
        _state_column(),
        sa.Column("time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.String(1000)),
        sa.PrimaryKeyConstraint("id", name="pk_sqr_timer_detail"),
    )

    # ── Indexes ────────────────────────────────────────────────────────────
    op.create_index("ix_adm_user_group_user_id", "adm_user_group", ["user_id"])
    op.create_index("ix_adm_user_group_group_id", "adm_user_group", ["group_id"])
    op.create_index("ix_sqr_team_square_id", "sqr_team", ["square_id"])
    op.create_index("ix_sqr_square_user_user_id", "sqr_square_user", ["user_id"])
    op.create_index("ix_sqr_square_user_role_id", "sqr_square_user", ["role_id"])
    op.create_index("ix_sqr_square_user_square_id", "sqr_square_user", ["square_id"])
    op.create_index("ix_sqr_square_user_team_id", "sqr_square_user", ["team_id"])
    op.create_index("ix_sqr_timer_square_id", "sqr_timer", ["square_id"])
    op.create_index("ix_sqr_timer_team_id", "sqr_timer", ["team_id"])
    op.create_index("ix_sqr_timer_detail_timer_id", "sqr_timer_detail", ["timer_id"])


def downgrade() -> None:
    """Drops everything in reverse dependency order."""
    op.drop_table("sqr_timer_detail")
    op.drop_table("sqr_timer")
    op.drop_table("sqr_square_user")
    op.drop_table("sqr_team")
    op.drop_table("sqr_square")
    op.drop_table("sqr_role")
    op.drop_table("adm_user_group")
    op.drop_table("adm_user")
    op.drop_table("adm_group")
