"""
models/square.py - Square and team table definitions.

A square is the root aggregate: teams, timers and membership rows are all
scoped to it by square_id. FK policy is ON DELETE CASCADE towards the square;
the service also removes children explicitly so the behaviour is the same on
databases that do not enforce foreign keys.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from square_admin.app.extensions import IdType, db


class SqrSquare(db.Model):
    __tablename__ = "sqr_square"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    caption: Mapped[str | None] = mapped_column(String(255))

    description: Mapped[str | None] = mapped_column(String(1000))

    # ── Relationships ──────────────────────────────────────────────────────

    teams: Mapped[list["SqrTeam"]] = relationship(
        "SqrTeam",
        back_populates="square",
        order_by="SqrTeam.id",
    )

    square_users: Mapped[list["SqrSquareUser"]] = relationship(  # noqa: F821
        "SqrSquareUser",
        back_populates="square",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<SqrSquare id={self.id} name={self.name!r}>"


class SqrTeam(db.Model):
    __tablename__ = "sqr_team"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)

    square_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("sqr_square.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    caption: Mapped[str | None] = mapped_column(String(255))

    description: Mapped[str | None] = mapped_column(String(1000))

    # ── Relationships ──────────────────────────────────────────────────────

    square: Mapped["SqrSquare"] = relationship(
        "SqrSquare",
        back_populates="teams",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<SqrTeam id={self.id} square_id={self.square_id} name={self.name!r}>"
