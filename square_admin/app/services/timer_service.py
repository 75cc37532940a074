"""
services/timer_service.py - Team timers of a square.

Rules enforced here:
  - One timer per team per square. recreate_timers() replaces the whole set:
    old timers and their details are deleted, then every current team gets a
    fresh READY timer with one READY detail row.
  - recreate_timers() only flushes. The route commits once, and any error
    before the commit rolls the whole replacement back, so readers see either
    the old or the new timer set.
  - Timer state is persisted and echoed back. No begin/pause/continue/stop
    transition or remaining-time computation exists; countLeft is a constant.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility - only flush here.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, selectinload

from square_admin.app.models.square import SqrTeam
from square_admin.app.models.timer import SqrTimer, SqrTimerDetail, TimerState

logger = logging.getLogger(__name__)

RECREATE_DESCRIPTION = "teams timers recreated"

# Remaining-time computation is not defined; every timer reports this value.
COUNT_LEFT_STUB = 0


# ── Private helpers ────────────────────────────────────────────────────────

def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _state_dict(state: TimerState | str) -> dict:
    return {"key": TimerState(state).value}


def _build_detail_dict(detail: SqrTimerDetail) -> dict:
    return {
        "id": detail.id,
        "state": _state_dict(detail.state),
        "time": _iso(detail.time),
        "description": detail.description,
    }


def _build_timer_dict(timer: SqrTimer) -> dict:
    return {
        "id": timer.id,
        "squareId": timer.square_id,
        "teamId": timer.team_id,
        "caption": timer.caption,
        "state": _state_dict(timer.state),
        "count": timer.count,
        "countLeft": COUNT_LEFT_STUB,
        "beginTime": _iso(timer.begin_time),
        "pauseTime": _iso(timer.pause_time),
        "continueTime": _iso(timer.continue_time),
        "stopTime": _iso(timer.stop_time),
        "details": [_build_detail_dict(d) for d in timer.details],
    }


def _square_teams(square_id: int, session: Session) -> list[SqrTeam]:
    stmt = select(SqrTeam).where(SqrTeam.square_id == square_id).order_by(SqrTeam.id)
    return list(session.execute(stmt).scalars().all())


def delete_timers(session: Session, *conditions) -> None:
    """
    Deletes the timers matching `conditions` together with their details.

    Details go first so the result does not depend on the database enforcing
    ON DELETE CASCADE.
    """
    timer_ids = select(SqrTimer.id).where(*conditions)
    session.execute(
        delete(SqrTimerDetail)
        .where(SqrTimerDetail.timer_id.in_(timer_ids))
        .execution_options(synchronize_session=False)
    )
    session.execute(
        delete(SqrTimer)
        .where(*conditions)
        .execution_options(synchronize_session=False)
    )
    session.flush()
    # Bulk deletes bypass the identity map; drop stale instances.
    session.expire_all()


# ── Public service functions ───────────────────────────────────────────────

def list_timers(square_id: int, session: Session) -> list[dict]:
    """All timers of the square with their detail history, ordered by id."""
    stmt = (
        select(SqrTimer)
        .options(selectinload(SqrTimer.details))
        .where(SqrTimer.square_id == square_id)
        .order_by(SqrTimer.id)
    )
    timers = session.execute(stmt).scalars().all()
    return [_build_timer_dict(t) for t in timers]


def recreate_timers(square_id: int, session: Session) -> int:
    """
    Replaces the square's timers with one READY timer per current team.

    Returns the number of timers created.
    """
    delete_timers(session, SqrTimer.square_id == square_id)

    now = datetime.now(timezone.utc)
    teams = _square_teams(square_id, session)
    for team in teams:
        timer = SqrTimer(
            square_id=square_id,
            team_id=team.id,
            caption=team.caption or team.name,
            state=TimerState.READY,
            count=0,
        )
        timer.details.append(SqrTimerDetail(
            state=TimerState.READY,
            time=now,
            description=RECREATE_DESCRIPTION,
        ))
        session.add(timer)

    session.flush()
    logger.info("Recreated %d timers for square %s", len(teams), square_id)
    return len(teams)


def set_timer_count(
        square_id: int,
        count: int,
        session: Session,
        timer_id: int | None = None,
) -> int:
    """
    Sets `count` on one timer of the square, or on all of them when
    `timer_id` is None. Non-matching ids are a no-op.

    Returns the number of updated timers.
    """
    stmt = update(SqrTimer).where(SqrTimer.square_id == square_id)
    if timer_id is not None:
        stmt = stmt.where(SqrTimer.id == timer_id)
    result = session.execute(
        stmt.values(count=count).execution_options(synchronize_session="fetch")
    )
    session.flush()
    logger.info(
        "Set count=%s on timer %s of square %s",
        count, timer_id if timer_id is not None else "*", square_id,
    )
    return result.rowcount or 0
