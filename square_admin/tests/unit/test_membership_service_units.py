"""
Unit tests for membership_service branches that integration tests reach only
indirectly: group cache reconciliation, the no-op paths of bulk operations,
and the single-statement team assignment.

These tests run DB-free with mocked session/query behavior.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from square_admin.app.errors import AppError, ErrorCode
from square_admin.app.services import membership_service


def _result(rows=None, scalars=None, rowcount=0) -> MagicMock:
    result = MagicMock()
    result.all.return_value = rows or []
    result.scalars.return_value.all.return_value = scalars or []
    result.rowcount = rowcount
    return result


def test_caption_filter_is_none_for_empty_filter():
    assert membership_service._caption_filter(MagicMock(), None) is None
    assert membership_service._caption_filter(MagicMock(), "") is None


def test_caption_filter_escapes_like_wildcards():
    column = MagicMock()

    membership_service._caption_filter(column, "50%_off")

    column.icontains.assert_called_once_with("50%_off", autoescape=True)


def test_require_existing_reports_first_missing_id():
    session = MagicMock()
    session.execute.return_value = _result(scalars=[1, 3])
    model = MagicMock()

    with pytest.raises(AppError) as exc_info:
        membership_service._require_existing(
            model, [1, 2, 3, 4], ErrorCode.USER_NOT_FOUND, "User", session,
        )

    err = exc_info.value
    assert err.code == ErrorCode.USER_NOT_FOUND
    assert err.http_status == 404
    assert "User 2" in err.message


def test_require_square_teams_rejects_foreign_team():
    session = MagicMock()
    session.execute.return_value = _result(scalars=[10])

    with pytest.raises(AppError) as exc_info:
        membership_service._require_square_teams(square_id=1, team_ids=[10, 20], session=session)

    assert exc_info.value.code == ErrorCode.TEAM_NOT_FOUND


# ── reconcile_user_groups ──────────────────────────────────────────────────

def test_reconcile_without_candidates_does_nothing():
    session = MagicMock()

    removed = membership_service.reconcile_user_groups([1, 2], [], session)

    assert removed == 0
    session.execute.assert_not_called()


def test_reconcile_deletes_only_groups_no_longer_implied():
    session = MagicMock()
    still_implied = _result(rows=[SimpleNamespace(user_id=1, group_id=10)])
    delete_result = _result(rowcount=1)
    session.execute.side_effect = [still_implied, delete_result]

    removed = membership_service.reconcile_user_groups([1, 2], [10], session)

    # user 1 keeps group 10, user 2 loses it: one query + one delete
    assert removed == 1
    assert session.execute.call_count == 2
    session.flush.assert_called_once()


def test_reconcile_keeps_everything_when_all_groups_still_implied():
    session = MagicMock()
    session.execute.return_value = _result(rows=[
        SimpleNamespace(user_id=1, group_id=10),
        SimpleNamespace(user_id=1, group_id=11),
    ])

    removed = membership_service.reconcile_user_groups([1], [10, 11], session)

    assert removed == 0
    session.execute.assert_called_once()


# ── grant / revoke ─────────────────────────────────────────────────────────

def test_grant_with_empty_lists_is_a_no_op():
    session = MagicMock()

    assert membership_service.grant_roles(1, [], [5], session) == 0
    assert membership_service.grant_roles(1, [5], [], session) == 0
    session.execute.assert_not_called()
    session.add.assert_not_called()


@patch("square_admin.app.services.membership_service._role_group_ids", return_value=set())
@patch("square_admin.app.services.membership_service._require_existing")
def test_grant_skips_existing_pairs(mock_require_existing, mock_role_group_ids):
    session = MagicMock()
    session.execute.return_value = _result(rows=[SimpleNamespace(role_id=7, user_id=1)])

    created = membership_service.grant_roles(3, [7], [1, 2], session)

    assert created == 1
    session.add.assert_called_once()
    added = session.add.call_args.args[0]
    assert (added.user_id, added.role_id, added.square_id) == (2, 7, 3)
    assert mock_require_existing.call_count == 2


@patch("square_admin.app.services.membership_service.reconcile_user_groups")
@patch("square_admin.app.services.membership_service._role_group_ids", return_value={10})
def test_revoke_reconciles_groups_of_revoked_roles(mock_role_group_ids, mock_reconcile):
    session = MagicMock()
    session.execute.return_value = _result(rowcount=2)

    removed = membership_service.revoke_roles(3, [7], [1, 2], session)

    assert removed == 2
    mock_reconcile.assert_called_once_with([1, 2], {10}, session)


# ── team assignment ────────────────────────────────────────────────────────

@patch("square_admin.app.services.membership_service._require_square_teams")
def test_assign_uses_last_team_in_one_statement(mock_require_square_teams):
    session = MagicMock()
    session.execute.return_value = _result(rowcount=2)

    updated = membership_service.assign_to_teams(1, [10, 20], [100, 101], session)

    assert updated == 2
    session.execute.assert_called_once()
    stmt = session.execute.call_args.args[0]
    assert stmt.compile().params["team_id"] == 20
    mock_require_square_teams.assert_called_once_with(1, [10, 20], session)


def test_assign_with_no_rows_is_a_no_op():
    session = MagicMock()

    assert membership_service.assign_to_teams(1, [10], [], session) == 0
    session.execute.assert_not_called()


def test_unassign_with_no_teams_is_a_no_op():
    session = MagicMock()

    assert membership_service.unassign_from_teams(1, [], [100], session) == 0
    session.execute.assert_not_called()
