"""
client/sqr_square_client.py - HTTP clients for the Square REST API.

Each method maps one backend endpoint onto an HTTP call and unwraps the
{"data": ...} envelope. There is no business logic here beyond URL building
and default-parameter handling:

  - list fetches that lack a required id (no square or role selected yet)
    return [] without issuing a request;
  - id lists are sent comma-joined in a single path segment;
  - an empty fastFilter is not sent at all.

HTTP errors propagate as requests.HTTPError after being logged.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from square_admin.client import config

logger = logging.getLogger(__name__)


def _join_ids(ids: Iterable[int]) -> str:
    return ",".join(str(int(i)) for i in ids)


def _member_params(fast_filter: Optional[str], show_all_users: bool) -> Dict[str, Any]:
    params: Dict[str, Any] = {"showAllUsers": "true" if show_all_users else "false"}
    if fast_filter:
        params["fastFilter"] = fast_filter
    return params


class ApiClient:
    """Shared session, auth header and envelope handling."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None,
    ) -> None:
        self.base_url = (base_url or config.api_url()).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or config.request_timeout()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if token:
            self.set_token(token)

    def set_token(self, token: str) -> None:
        self.session.headers["Authorization"] = f"Bearer {token}"

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = self._url(path)
        logger.debug("%s %s params=%s", method, url, params)
        response = self.session.request(
            method,
            url,
            json=json,
            params=params,
            timeout=self.timeout,
        )
        try:
            response.raise_for_status()
        except requests.HTTPError:
            logger.warning("%s %s failed with HTTP %s: %s",
                           method, url, response.status_code, response.text)
            raise
        if not response.content:
            return None
        return response.json().get("data")


class AuthClient(ApiClient):

    def login(self, name: str, password: str) -> Dict[str, Any]:
        """Logs in and keeps the returned token on this client's session."""
        data = self._request("POST", "/auth/login", json={"name": name, "password": password})
        self.set_token(data["accessToken"])
        return data

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me")


class SqrRoleClient(ApiClient):
    """Global role CRUD under /sqr-role."""

    _rest_path = "/sqr-role"

    def get_roles(self) -> List[Dict[str, Any]]:
        return self._request("GET", self._rest_path)

    def get_role(self, role_id: int) -> Dict[str, Any]:
        return self._request("GET", f"{self._rest_path}/{role_id}")

    def create_role(self, role: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", self._rest_path, json=role)

    def edit_role(self, role_id: int, role: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"{self._rest_path}/{role_id}", json=role)

    def delete_roles(self, role_ids: Iterable[int]) -> None:
        self._request("DELETE", f"{self._rest_path}/{_join_ids(role_ids)}")


class AdmGroupClient(ApiClient):
    """Authorization group CRUD under /adm-group."""

    _rest_path = "/adm-group"

    def get_groups(self) -> List[Dict[str, Any]]:
        return self._request("GET", self._rest_path)

    def get_group(self, group_id: int) -> Dict[str, Any]:
        return self._request("GET", f"{self._rest_path}/{group_id}")

    def create_group(self, group: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", self._rest_path, json=group)

    def edit_group(self, group_id: int, group: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"{self._rest_path}/{group_id}", json=group)

    def delete_groups(self, group_ids: Iterable[int]) -> None:
        self._request("DELETE", f"{self._rest_path}/{_join_ids(group_ids)}")


class AdmUserClient(ApiClient):
    """User CRUD and manual group membership under /adm-user."""

    _rest_path = "/adm-user"

    def get_users(self, fast_filter: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"fastFilter": fast_filter} if fast_filter else None
        return self._request("GET", self._rest_path, params=params)

    def get_user(self, user_id: int) -> Dict[str, Any]:
        return self._request("GET", f"{self._rest_path}/{user_id}")

    def create_user(self, user: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", self._rest_path, json=user)

    def edit_user(self, user_id: int, user: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"{self._rest_path}/{user_id}", json=user)

    def delete_users(self, user_ids: Iterable[int]) -> None:
        self._request("DELETE", f"{self._rest_path}/{_join_ids(user_ids)}")

    def get_user_groups(
        self,
        user_id: Optional[int],
        show_all_groups: bool = False,
    ) -> List[Dict[str, Any]]:
        if not user_id:
            return []
        return self._request(
            "GET",
            f"{self._rest_path}/{user_id}/adm-group",
            params={"showAllGroups": "true" if show_all_groups else "false"},
        )

    def add_user_to_groups(self, user_id: int, group_ids: Iterable[int]) -> None:
        self._request(
            "POST",
            f"{self._rest_path}/{user_id}/adm-group/{_join_ids(group_ids)}",
            json={},
        )

    def remove_user_from_groups(self, user_id: int, group_ids: Iterable[int]) -> None:
        self._request(
            "DELETE",
            f"{self._rest_path}/{user_id}/adm-group/{_join_ids(group_ids)}",
        )


class SqrSquareClient(ApiClient):
    """Squares, square roles, teams and timers under /sqr-square."""

    _rest_path = "/sqr-square"

    # ── Squares ────────────────────────────────────────────────────────────

    def get_squares(self) -> List[Dict[str, Any]]:
        return self._request("GET", self._rest_path)

    def get_square(self, square_id: int) -> Dict[str, Any]:
        return self._request("GET", f"{self._rest_path}/{square_id}")

    def create_square(self, square: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", self._rest_path, json=square)

    def edit_square(self, square_id: int, square: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"{self._rest_path}/{square_id}", json=square)

    def delete_squares(self, square_ids: Iterable[int]) -> None:
        self._request("DELETE", f"{self._rest_path}/{_join_ids(square_ids)}")

    # ── Square roles ───────────────────────────────────────────────────────

    def get_square_roles(self, square_id: Optional[int]) -> List[Dict[str, Any]]:
        if not square_id:
            return []
        return self._request("GET", f"{self._rest_path}/{square_id}/sqr-role")

    def get_square_role_users(
        self,
        square_id: Optional[int],
        role_id: Optional[int],
        fast_filter: Optional[str] = None,
        show_all_users: bool = False,
    ) -> List[Dict[str, Any]]:
        if not square_id or not role_id:
            return []
        return self._request(
            "GET",
            f"{self._rest_path}/{square_id}/sqr-role/{role_id}/user",
            params=_member_params(fast_filter, show_all_users),
        )

    def add_users_to_square_role(
        self,
        square_id: int,
        user_ids: Iterable[int],
        role_ids: Iterable[int],
    ) -> None:
        self._request(
            "POST",
            f"{self._rest_path}/{square_id}/sqr-role/{_join_ids(role_ids)}"
            f"/user/{_join_ids(user_ids)}",
            json={},
        )

    def remove_users_from_square_role(
        self,
        square_id: int,
        user_ids: Iterable[int],
        role_ids: Iterable[int],
    ) -> None:
        self._request(
            "DELETE",
            f"{self._rest_path}/{square_id}/sqr-role/{_join_ids(role_ids)}"
            f"/user/{_join_ids(user_ids)}",
        )

    # ── Teams ──────────────────────────────────────────────────────────────

    def get_square_teams(self, square_id: Optional[int]) -> List[Dict[str, Any]]:
        if not square_id:
            return []
        return self._request("GET", f"{self._rest_path}/{square_id}/sqr-team")

    def get_square_team(self, square_id: int, team_id: int) -> Dict[str, Any]:
        return self._request("GET", f"{self._rest_path}/{square_id}/sqr-team/{team_id}")

    def create_team(self, square_id: int, team: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", f"{self._rest_path}/{square_id}/sqr-team", json=team)

    def edit_team(self, square_id: int, team_id: int, team: Dict[str, Any]) -> Dict[str, Any]:
        return self._request(
            "PUT", f"{self._rest_path}/{square_id}/sqr-team/{team_id}", json=team,
        )

    def delete_teams(self, square_id: int, team_ids: Iterable[int]) -> None:
        self._request("DELETE", f"{self._rest_path}/{square_id}/sqr-team/{_join_ids(team_ids)}")

    def get_square_team_users(
        self,
        square_id: Optional[int],
        team_id: Optional[int],
        fast_filter: Optional[str] = None,
        show_all_users: bool = False,
    ) -> List[Dict[str, Any]]:
        if not square_id or not team_id:
            return []
        return self._request(
            "GET",
            f"{self._rest_path}/{square_id}/sqr-team/{team_id}/user",
            params=_member_params(fast_filter, show_all_users),
        )

    def add_users_to_square_team(
        self,
        square_id: int,
        square_user_ids: Iterable[int],
        team_ids: Iterable[int],
    ) -> None:
        self._request(
            "POST",
            f"{self._rest_path}/{square_id}/sqr-team/{_join_ids(team_ids)}"
            f"/user/{_join_ids(square_user_ids)}",
            json={},
        )

    def remove_users_from_square_team(
        self,
        square_id: int,
        square_user_ids: Iterable[int],
        team_ids: Iterable[int],
    ) -> None:
        self._request(
            "DELETE",
            f"{self._rest_path}/{square_id}/sqr-team/{_join_ids(team_ids)}"
            f"/user/{_join_ids(square_user_ids)}",
        )

    # ── Timers ─────────────────────────────────────────────────────────────

    def get_square_timers(self, square_id: Optional[int]) -> List[Dict[str, Any]]:
        if not square_id:
            return []
        return self._request("GET", f"{self._rest_path}/{square_id}/sqr-timer")

    def recreate_timers(self, square_id: int) -> None:
        self._request("POST", f"{self._rest_path}/{square_id}/sqr-timer/recreate")

    def set_all_timer_count(self, square_id: int, count: int) -> None:
        self._request("PATCH", f"{self._rest_path}/{square_id}/sqr-timer/set-count/{count}")

    def set_timer_count(self, square_id: int, timer_id: int, count: int) -> None:
        self._request(
            "PATCH",
            f"{self._rest_path}/{square_id}/sqr-timer/{timer_id}/set-count/{count}",
        )
