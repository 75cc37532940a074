"""
Unit tests for timer_service: serialization of timers and their details,
and the recreate / set-count flows with the session mocked out.
"""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from square_admin.app.models.timer import SqrTimer, TimerState
from square_admin.app.services import timer_service


def test_build_timer_dict_serializes_state_and_times():
    begin = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)
    detail = SimpleNamespace(
        id=5,
        state=TimerState.READY,
        time=begin,
        description="teams timers recreated",
    )
    timer = SimpleNamespace(
        id=1,
        square_id=2,
        team_id=3,
        caption="Red",
        state="RUNNING",
        count=4,
        begin_time=begin,
        pause_time=None,
        continue_time=None,
        stop_time=None,
        details=[detail],
    )

    result = timer_service._build_timer_dict(timer)

    assert result == {
        "id": 1,
        "squareId": 2,
        "teamId": 3,
        "caption": "Red",
        "state": {"key": "RUNNING"},
        "count": 4,
        "countLeft": timer_service.COUNT_LEFT_STUB,
        "beginTime": begin.isoformat(),
        "pauseTime": None,
        "continueTime": None,
        "stopTime": None,
        "details": [{
            "id": 5,
            "state": {"key": "READY"},
            "time": begin.isoformat(),
            "description": "teams timers recreated",
        }],
    }


@patch("square_admin.app.services.timer_service._square_teams")
@patch("square_admin.app.services.timer_service.delete_timers")
def test_recreate_creates_one_timer_per_team(mock_delete_timers, mock_square_teams):
    session = MagicMock()
    mock_square_teams.return_value = [
        SimpleNamespace(id=10, name="red", caption="Red"),
        SimpleNamespace(id=11, name="blue", caption=None),
    ]

    created = timer_service.recreate_timers(square_id=1, session=session)

    assert created == 2
    mock_delete_timers.assert_called_once()
    timers = [c.args[0] for c in session.add.call_args_list]
    assert all(isinstance(t, SqrTimer) for t in timers)
    assert [t.team_id for t in timers] == [10, 11]
    assert [t.caption for t in timers] == ["Red", "blue"]
    assert all(t.state == TimerState.READY for t in timers)
    assert all(len(t.details) == 1 for t in timers)
    assert timers[0].details[0].description == timer_service.RECREATE_DESCRIPTION
    session.flush.assert_called()


@patch("square_admin.app.services.timer_service._square_teams", return_value=[])
@patch("square_admin.app.services.timer_service.delete_timers")
def test_recreate_without_teams_only_deletes(mock_delete_timers, mock_square_teams):
    session = MagicMock()

    assert timer_service.recreate_timers(square_id=1, session=session) == 0
    mock_delete_timers.assert_called_once()
    session.add.assert_not_called()


def test_set_timer_count_returns_rowcount():
    session = MagicMock()
    session.execute.return_value.rowcount = 3

    assert timer_service.set_timer_count(square_id=1, count=7, session=session) == 3
    session.flush.assert_called_once()


def test_delete_timers_removes_details_before_timers():
    session = MagicMock()

    timer_service.delete_timers(session, SqrTimer.square_id == 1)

    first, second = [c.args[0] for c in session.execute.call_args_list]
    assert first.table.name == "sqr_timer_detail"
    assert second.table.name == "sqr_timer"
    session.expire_all.assert_called_once()
