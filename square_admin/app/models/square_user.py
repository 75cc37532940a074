"""
models/square_user.py - Square membership junction table.

One row per (user, role, square) grant, optionally placed on a team of the
same square. team_id NULL means "in the square, not yet on a team".
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from square_admin.app.extensions import IdType, db


class SqrSquareUser(db.Model):
    __tablename__ = "sqr_square_user"

    __table_args__ = (
        UniqueConstraint(
            "user_id", "role_id", "square_id",
            name="uq_sqr_square_user_user_role_square",
        ),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True)

    user_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("adm_user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("sqr_role.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    square_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("sqr_square.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ON DELETE SET NULL - removing a team returns its members to the square pool.
    team_id: Mapped[int | None] = mapped_column(
        IdType,
        ForeignKey("sqr_team.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    user: Mapped["AdmUser"] = relationship(  # noqa: F821
        "AdmUser",
        back_populates="square_users",
    )

    role: Mapped["SqrRole"] = relationship(  # noqa: F821
        "SqrRole",
        back_populates="square_users",
    )

    square: Mapped["SqrSquare"] = relationship(  # noqa: F821
        "SqrSquare",
        back_populates="square_users",
    )

    team: Mapped["SqrTeam"] = relationship("SqrTeam")  # noqa: F821

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<SqrSquareUser id={self.id} "
            f"user_id={self.user_id} "
            f"role_id={self.role_id} "
            f"square_id={self.square_id} "
            f"team_id={self.team_id}>"
        )
