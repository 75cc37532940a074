"""
models/timer.py - Team timer and timer-detail history tables.

Key design points:
  - One timer per team per square. Timers are replaced wholesale by
    timer_service.recreate_timers(), never migrated in place.
  - sqr_timer_detail is append-only: one row per state transition. Details are
    only ever deleted together with their timer.
  - `state` is persisted as a plain string enum; nothing is derived from the
    begin/pause/continue/stop columns.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from square_admin.app.extensions import IdType, db


class TimerState(str, enum.Enum):
    READY   = "READY"
    RUNNING = "RUNNING"
    PAUSED  = "PAUSED"
    STOPPED = "STOPPED"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Ensure SQLAlchemy stores enum values, not member names."""
    return [member.value for member in enum_cls]


def _timer_state_column() -> Enum:
    # VARCHAR + CHECK instead of a native enum type, so no CREATE TYPE is needed.
    return Enum(
        TimerState,
        name="sqr_timer_state",
        values_callable=_enum_values,
        native_enum=False,
        length=16,
    )


class SqrTimer(db.Model):
    __tablename__ = "sqr_timer"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)

    square_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("sqr_square.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    team_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("sqr_team.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    caption: Mapped[str | None] = mapped_column(String(255))

    state: Mapped[TimerState] = mapped_column(
        _timer_state_column(),
        nullable=False,
        default=TimerState.READY,
    )

    # Duration in seconds.
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    begin_time:    Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    pause_time:    Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    continue_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    stop_time:     Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # ── Relationships ──────────────────────────────────────────────────────

    team: Mapped["SqrTeam"] = relationship("SqrTeam")  # noqa: F821

    details: Mapped[list["SqrTimerDetail"]] = relationship(
        "SqrTimerDetail",
        back_populates="timer",
        order_by="SqrTimerDetail.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<SqrTimer id={self.id} "
            f"square_id={self.square_id} "
            f"team_id={self.team_id} "
            f"state={self.state}>"
        )


class SqrTimerDetail(db.Model):
    __tablename__ = "sqr_timer_detail"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)

    timer_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("sqr_timer.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    state: Mapped[TimerState] = mapped_column(
        _timer_state_column(),
        nullable=False,
    )

    time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    description: Mapped[str | None] = mapped_column(String(1000))

    # ── Relationships ──────────────────────────────────────────────────────

    timer: Mapped["SqrTimer"] = relationship(
        "SqrTimer",
        back_populates="details",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<SqrTimerDetail id={self.id} timer_id={self.timer_id} state={self.state}>"
