"""
client/stores.py - Per-screen view state over the API clients.

Each store is built for one screen with its client injected, holds the last
fetched collection plus the screen's filter state, and is thrown away with
`dispose()` when the screen closes. Every mutation is followed by a re-fetch;
there is no optimistic update and no cache eviction.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from square_admin.client.sqr_square_client import (
    AdmGroupClient,
    AdmUserClient,
    SqrSquareClient,
)

logger = logging.getLogger(__name__)


class SqrSquareStore:
    """Square list screen."""

    def __init__(self, client: SqrSquareClient) -> None:
        self.client = client
        self.squares: List[Dict[str, Any]] = []
        self.fast_filter: str = ""
        self.selected_square_id: Optional[int] = None

    @property
    def visible_squares(self) -> List[Dict[str, Any]]:
        """Squares whose caption or name contains the filter, case-insensitively."""
        needle = self.fast_filter.strip().lower()
        if not needle:
            return list(self.squares)
        return [
            s for s in self.squares
            if needle in (s.get("caption") or "").lower()
            or needle in (s.get("name") or "").lower()
        ]

    def refresh(self) -> List[Dict[str, Any]]:
        self.squares = self.client.get_squares()
        known = {s["id"] for s in self.squares}
        if self.selected_square_id not in known:
            self.selected_square_id = None
        return self.squares

    def select(self, square_id: Optional[int]) -> None:
        self.selected_square_id = square_id

    def save(self, square: Dict[str, Any]) -> Dict[str, Any]:
        """Creates the square when it has no id, updates it otherwise."""
        if square.get("id"):
            result = self.client.edit_square(square["id"], square)
        else:
            result = self.client.create_square(square)
        self.refresh()
        return result

    def delete(self, square_ids: List[int]) -> None:
        self.client.delete_squares(square_ids)
        self.refresh()

    def dispose(self) -> None:
        self.squares = []
        self.fast_filter = ""
        self.selected_square_id = None


class SqrSquareRoleStore:
    """Role membership screen of one square."""

    def __init__(self, client: SqrSquareClient, square_id: Optional[int] = None) -> None:
        self.client = client
        self.square_id = square_id
        self.roles: List[Dict[str, Any]] = []
        self.role_id: Optional[int] = None
        self.users: List[Dict[str, Any]] = []
        self.fast_filter: str = ""
        self.show_all_users: bool = False

    def load_roles(self) -> List[Dict[str, Any]]:
        self.roles = self.client.get_square_roles(self.square_id)
        return self.roles

    def select_role(self, role_id: Optional[int]) -> List[Dict[str, Any]]:
        self.role_id = role_id
        return self.refresh()

    def set_filter(self, fast_filter: str) -> List[Dict[str, Any]]:
        self.fast_filter = fast_filter
        return self.refresh()

    def set_show_all_users(self, show_all_users: bool) -> List[Dict[str, Any]]:
        self.show_all_users = show_all_users
        return self.refresh()

    def refresh(self) -> List[Dict[str, Any]]:
        self.users = self.client.get_square_role_users(
            self.square_id,
            self.role_id,
            self.fast_filter,
            self.show_all_users,
        )
        return self.users

    def add_users(self, user_ids: List[int]) -> None:
        if self.square_id is None or self.role_id is None or not user_ids:
            return
        self.client.add_users_to_square_role(self.square_id, user_ids, [self.role_id])
        self.refresh()

    def remove_users(self, user_ids: List[int]) -> None:
        if self.square_id is None or self.role_id is None or not user_ids:
            return
        self.client.remove_users_from_square_role(self.square_id, user_ids, [self.role_id])
        self.refresh()

    def dispose(self) -> None:
        self.roles = []
        self.users = []
        self.role_id = None
        self.fast_filter = ""
        self.show_all_users = False


class SqrSquareTeamStore:
    """Team list and team membership screen of one square."""

    def __init__(self, client: SqrSquareClient, square_id: Optional[int] = None) -> None:
        self.client = client
        self.square_id = square_id
        self.teams: List[Dict[str, Any]] = []
        self.team_id: Optional[int] = None
        self.members: List[Dict[str, Any]] = []
        self.fast_filter: str = ""
        self.show_all_users: bool = False

    def load_teams(self) -> List[Dict[str, Any]]:
        self.teams = self.client.get_square_teams(self.square_id)
        if self.team_id not in {t["id"] for t in self.teams}:
            self.team_id = None
            self.members = []
        return self.teams

    def select_team(self, team_id: Optional[int]) -> List[Dict[str, Any]]:
        self.team_id = team_id
        return self.refresh_members()

    def set_filter(self, fast_filter: str) -> List[Dict[str, Any]]:
        self.fast_filter = fast_filter
        return self.refresh_members()

    def set_show_all_users(self, show_all_users: bool) -> List[Dict[str, Any]]:
        self.show_all_users = show_all_users
        return self.refresh_members()

    def refresh_members(self) -> List[Dict[str, Any]]:
        self.members = self.client.get_square_team_users(
            self.square_id,
            self.team_id,
            self.fast_filter,
            self.show_all_users,
        )
        return self.members

    def save_team(self, team: Dict[str, Any]) -> Dict[str, Any]:
        if team.get("id"):
            result = self.client.edit_team(self.square_id, team["id"], team)
        else:
            result = self.client.create_team(self.square_id, team)
        self.load_teams()
        return result

    def delete_teams(self, team_ids: List[int]) -> None:
        self.client.delete_teams(self.square_id, team_ids)
        self.load_teams()

    def add_members(self, square_user_ids: List[int]) -> None:
        if self.square_id is None or self.team_id is None or not square_user_ids:
            return
        self.client.add_users_to_square_team(self.square_id, square_user_ids, [self.team_id])
        self.refresh_members()

    def remove_members(self, square_user_ids: List[int]) -> None:
        if self.square_id is None or self.team_id is None or not square_user_ids:
            return
        self.client.remove_users_from_square_team(self.square_id, square_user_ids, [self.team_id])
        self.refresh_members()

    def dispose(self) -> None:
        self.teams = []
        self.members = []
        self.team_id = None
        self.fast_filter = ""
        self.show_all_users = False


class SqrTimerStore:
    """Timer board of one square."""

    def __init__(self, client: SqrSquareClient, square_id: Optional[int] = None) -> None:
        self.client = client
        self.square_id = square_id
        self.timers: List[Dict[str, Any]] = []

    def refresh(self) -> List[Dict[str, Any]]:
        self.timers = self.client.get_square_timers(self.square_id)
        return self.timers

    def recreate(self) -> List[Dict[str, Any]]:
        if self.square_id is None:
            return []
        self.client.recreate_timers(self.square_id)
        logger.info("Timers of square %s recreated", self.square_id)
        return self.refresh()

    def set_count(self, count: int, timer_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """Sets the count on one timer, or on every timer when timer_id is None."""
        if self.square_id is None:
            return []
        if timer_id is None:
            self.client.set_all_timer_count(self.square_id, count)
        else:
            self.client.set_timer_count(self.square_id, timer_id, count)
        return self.refresh()

    def dispose(self) -> None:
        self.timers = []


class AdmUserStore:
    """User list screen. The filter is applied by the server."""

    def __init__(self, client: AdmUserClient) -> None:
        self.client = client
        self.users: List[Dict[str, Any]] = []
        self.fast_filter: str = ""
        self.selected_user_id: Optional[int] = None

    def refresh(self) -> List[Dict[str, Any]]:
        self.users = self.client.get_users(self.fast_filter)
        if self.selected_user_id not in {u["id"] for u in self.users}:
            self.selected_user_id = None
        return self.users

    def set_filter(self, fast_filter: str) -> List[Dict[str, Any]]:
        self.fast_filter = fast_filter
        return self.refresh()

    def select(self, user_id: Optional[int]) -> None:
        self.selected_user_id = user_id

    def save(self, user: Dict[str, Any]) -> Dict[str, Any]:
        """Creates the user when it has no id, updates it otherwise."""
        if user.get("id"):
            result = self.client.edit_user(user["id"], user)
        else:
            result = self.client.create_user(user)
        self.refresh()
        return result

    def delete(self, user_ids: List[int]) -> None:
        self.client.delete_users(user_ids)
        self.refresh()

    def dispose(self) -> None:
        self.users = []
        self.fast_filter = ""
        self.selected_user_id = None


class AdmGroupStore:
    """Group list screen."""

    def __init__(self, client: AdmGroupClient) -> None:
        self.client = client
        self.groups: List[Dict[str, Any]] = []

    def refresh(self) -> List[Dict[str, Any]]:
        self.groups = self.client.get_groups()
        return self.groups

    def save(self, group: Dict[str, Any]) -> Dict[str, Any]:
        if group.get("id"):
            result = self.client.edit_group(group["id"], group)
        else:
            result = self.client.create_group(group)
        self.refresh()
        return result

    def delete(self, group_ids: List[int]) -> None:
        self.client.delete_groups(group_ids)
        self.refresh()

    def dispose(self) -> None:
        self.groups = []


class AdmUserGroupStore:
    """Group membership panel of one user."""

    def __init__(self, client: AdmUserClient, user_id: Optional[int] = None) -> None:
        self.client = client
        self.user_id = user_id
        self.groups: List[Dict[str, Any]] = []
        self.show_all_groups: bool = False

    def refresh(self) -> List[Dict[str, Any]]:
        self.groups = self.client.get_user_groups(self.user_id, self.show_all_groups)
        return self.groups

    def set_show_all_groups(self, show_all_groups: bool) -> List[Dict[str, Any]]:
        self.show_all_groups = show_all_groups
        return self.refresh()

    def add_groups(self, group_ids: List[int]) -> None:
        if self.user_id is None or not group_ids:
            return
        self.client.add_user_to_groups(self.user_id, group_ids)
        self.refresh()

    def remove_groups(self, group_ids: List[int]) -> None:
        if self.user_id is None or not group_ids:
            return
        self.client.remove_user_from_groups(self.user_id, group_ids)
        self.refresh()

    def dispose(self) -> None:
        self.groups = []
        self.show_all_groups = False
