"""
models/group.py - Authorization group and user-group link tables.

No business logic. No imports from services or routes.

adm_user_group is the derived group-membership cache: rows are written when a
square role is granted and reconciled when one is revoked
(services/membership_service.py).
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from square_admin.app.extensions import IdType, db


class AdmGroup(db.Model):
    __tablename__ = "adm_group"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    caption: Mapped[str | None] = mapped_column(String(255))

    description: Mapped[str | None] = mapped_column(String(1000))

    # ── Relationships ──────────────────────────────────────────────────────

    user_groups: Mapped[list["AdmUserGroup"]] = relationship(  # noqa: F821
        "AdmUserGroup",
        back_populates="group",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<AdmGroup id={self.id} name={self.name!r}>"


class AdmUserGroup(db.Model):
    __tablename__ = "adm_user_group"

    __table_args__ = (
        UniqueConstraint("user_id", "group_id", name="uq_adm_user_group_user_group"),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True)

    user_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("adm_user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    group_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("adm_group.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    user: Mapped["AdmUser"] = relationship(  # noqa: F821
        "AdmUser",
        back_populates="user_groups",
    )

    group: Mapped["AdmGroup"] = relationship(
        "AdmGroup",
        back_populates="user_groups",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<AdmUserGroup id={self.id} "
            f"user_id={self.user_id} "
            f"group_id={self.group_id}>"
        )
