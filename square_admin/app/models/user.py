"""
models/user.py - User table definition.

No business logic. No imports from services or routes.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from square_admin.app.extensions import IdType, db


class AdmUser(db.Model):
    __tablename__ = "adm_user"

    __table_args__ = (
        CheckConstraint(
            "LENGTH(TRIM(name)) > 0",
            name="ck_adm_user_name_nonempty",
        ),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True)

    # Login name. The literal "admin" user never shows up in square listings.
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    caption: Mapped[str | None] = mapped_column(String(255))

    password_hash: Mapped[str | None] = mapped_column(String(255))

    # ── Relationships ──────────────────────────────────────────────────────
    # Read-only navigation - no logic here.

    square_users: Mapped[list["SqrSquareUser"]] = relationship(  # noqa: F821
        "SqrSquareUser",
        back_populates="user",
    )

    user_groups: Mapped[list["AdmUserGroup"]] = relationship(  # noqa: F821
        "AdmUserGroup",
        back_populates="user",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<AdmUser id={self.id} name={self.name!r}>"
