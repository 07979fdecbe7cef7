import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import requests

from .settings import BackendConfig

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when the hosted backend rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(BackendError):
    pass


@dataclass
class AuthSession:
    access_token: str
    user_id: str
    email: Optional[str] = None
    refresh_token: Optional[str] = None

    def as_dict(self) -> Dict:
        return asdict(self)


class OrbitBackend:
    """Client for the hosted auth and data API backing the athlete follower app."""

    EVENT_COLUMNS = "id,title,start_time,result,category"
    FEED_COLUMNS = "id,title,start_time,result,category,entity_id,entities(name,image_url)"

    def __init__(self, config: BackendConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    # ------------------------------------------------------------------ #
    # Auth
    # ------------------------------------------------------------------ #
    def sign_in(self, email: str, password: str) -> AuthSession:
        payload = self._auth_request(
            "POST", "token", params={"grant_type": "password"}, json={"email": email, "password": password}
        )
        return self._session_from_payload(payload)

    def sign_up(self, email: str, password: str) -> Optional[AuthSession]:
        """Create an account; None means the backend is waiting on email confirmation."""
        payload = self._auth_request("POST", "signup", json={"email": email, "password": password})
        if payload and payload.get("access_token"):
            return self._session_from_payload(payload)
        logger.info("Sign-up for %s pending email confirmation", email)
        return None

    def sign_out(self, access_token: str) -> None:
        try:
            self._request("POST", "/auth/v1/logout", access_token=access_token)
        except BackendError as exc:
            logger.warning("Sign-out failed: %s", exc)

    def get_user(self, access_token: str) -> Optional[Dict]:
        try:
            return self._request("GET", "/auth/v1/user", access_token=access_token)
        except BackendError as exc:
            logger.warning("Unable to resolve current user: %s", exc)
            return None

    # ------------------------------------------------------------------ #
    # Athletes
    # ------------------------------------------------------------------ #
    def fetch_athletes(self, access_token: Optional[str] = None) -> List[Dict]:
        try:
            return self._table("GET", "entities", {"select": "*", "order": "name.asc"}, access_token) or []
        except BackendError as exc:
            logger.error("Error fetching athletes: %s", exc)
            return []

    def fetch_followed_athletes(self, user_id: str, access_token: Optional[str] = None) -> List[Dict]:
        params = {"select": "entity_id,entities(*)", "user_id": f"eq.{user_id}"}
        try:
            rows = self._table("GET", "follows", params, access_token) or []
        except BackendError as exc:
            logger.error("Error fetching followed athletes: %s", exc)
            return []
        return [row["entities"] for row in rows if row.get("entities")]

    def fetch_athlete_profile(self, athlete_id: Any, access_token: Optional[str] = None) -> Dict:
        athlete = self._table(
            "GET",
            "entities",
            {"select": "*", "id": f"eq.{athlete_id}"},
            access_token,
            headers={"Accept": "application/vnd.pgrst.object+json"},
        )
        events = self._table(
            "GET",
            "events",
            {"select": self.EVENT_COLUMNS, "entity_id": f"eq.{athlete_id}", "order": "start_time.desc"},
            access_token,
        )
        return {**athlete, "events": events or []}

    # ------------------------------------------------------------------ #
    # Follows & feed
    # ------------------------------------------------------------------ #
    def toggle_follow(
        self,
        user_id: str,
        entity_id: Any,
        is_currently_following: bool,
        access_token: Optional[str] = None,
    ) -> bool:
        try:
            if is_currently_following:
                self._table(
                    "DELETE",
                    "follows",
                    {"user_id": f"eq.{user_id}", "entity_id": f"eq.{entity_id}"},
                    access_token,
                )
            else:
                self._table(
                    "POST",
                    "follows",
                    None,
                    access_token,
                    json=[{"user_id": user_id, "entity_id": entity_id}],
                    headers={"Prefer": "return=minimal"},
                )
        except BackendError as exc:
            logger.error("Error updating follow for %s -> %s: %s", user_id, entity_id, exc)
            return False
        return True

    def fetch_user_feed(
        self,
        user_id: str,
        access_token: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict]:
        """Most recent events of every athlete the user follows, newest first."""
        if limit is None:
            limit = self.config.feed_limit
        try:
            follows = self._table(
                "GET", "follows", {"select": "entity_id", "user_id": f"eq.{user_id}"}, access_token
            ) or []
            entity_ids = [str(row["entity_id"]) for row in follows if row.get("entity_id") is not None]
            if not entity_ids:
                return []

            params = {
                "select": self.FEED_COLUMNS,
                "entity_id": f"in.({','.join(entity_ids)})",
                "order": "start_time.desc",
                "limit": str(limit),
            }
            return self._table("GET", "events", params, access_token) or []
        except BackendError as exc:
            logger.error("Error fetching feed for %s: %s", user_id, exc)
            return []

    # ------------------------------------------------------------------ #
    # HTTP helpers
    # ------------------------------------------------------------------ #
    def _table(
        self,
        method: str,
        table: str,
        params: Optional[Dict],
        access_token: Optional[str],
        json: Any = None,
        headers: Optional[Dict] = None,
    ) -> Any:
        return self._request(
            method, f"/rest/v1/{table}", params=params, json=json, headers=headers, access_token=access_token
        )

    def _auth_request(self, method: str, endpoint: str, params: Optional[Dict] = None, json: Any = None) -> Dict:
        try:
            return self._request(method, f"/auth/v1/{endpoint}", params=params, json=json) or {}
        except BackendError as exc:
            raise AuthError(str(exc), exc.status_code) from exc

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict] = None,
        json: Any = None,
        headers: Optional[Dict] = None,
        access_token: Optional[str] = None,
    ) -> Any:
        request_headers = {
            "apikey": self.config.anon_key,
            "Authorization": f"Bearer {access_token or self.config.anon_key}",
        }
        request_headers.update(headers or {})

        try:
            response = self.session.request(
                method,
                f"{self.config.url}{path}",
                params=params,
                json=json,
                headers=request_headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise BackendError(f"{method} {path} failed: {exc}") from exc

        if response.status_code >= 400:
            raise BackendError(self._error_message(response), response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(f"{method} {path} returned a non-JSON body", response.status_code) from exc

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

        if isinstance(body, dict):
            for field in ("error_description", "msg", "message", "error"):
                if body.get(field):
                    return str(body[field])
        return f"HTTP {response.status_code}"

    @staticmethod
    def _session_from_payload(payload: Dict) -> AuthSession:
        user = payload.get("user") or {}
        if not payload.get("access_token") or not user.get("id"):
            raise AuthError("Authentication response did not include a session")
        return AuthSession(
            access_token=payload["access_token"],
            user_id=user["id"],
            email=user.get("email"),
            refresh_token=payload.get("refresh_token"),
        )
