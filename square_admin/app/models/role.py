"""
models/role.py - Square role table definition.

Roles are global. They are assigned to users per square through
sqr_square_user. group_id links a role to the authorization group that the
role implies.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from square_admin.app.extensions import IdType, db


class SqrRole(db.Model):
    __tablename__ = "sqr_role"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    caption: Mapped[str | None] = mapped_column(String(255))

    description: Mapped[str | None] = mapped_column(String(1000))

    # ON DELETE SET NULL - dropping a group leaves the role without a cache target.
    group_id: Mapped[int | None] = mapped_column(
        IdType,
        ForeignKey("adm_group.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    group: Mapped["AdmGroup"] = relationship("AdmGroup")  # noqa: F821

    square_users: Mapped[list["SqrSquareUser"]] = relationship(  # noqa: F821
        "SqrSquareUser",
        back_populates="role",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<SqrRole id={self.id} name={self.name!r}>"
