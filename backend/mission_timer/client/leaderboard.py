from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from mission_timer.exceptions import NotFoundError, TransportError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:5000"


@dataclass(frozen=True)
class BoardEntry:
    id: str
    name: str
    time_ms: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoardEntry":
        try:
            return cls(id=str(data["id"]), name=str(data["name"]), time_ms=int(data["timeMs"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise TransportError(f"Malformed leaderboard entry: {data!r}") from exc


class LeaderboardClient:
    """HTTP client for the leaderboard API.

    Usage:
      client = LeaderboardClient("http://localhost:5000")
      client.insert("AGENT1", 13000)
    """

    def __init__(self, base_url: str = DEFAULT_SERVER_URL, timeout: float = 5.0,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    # ---------- Low-level request wrapper ----------
    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug("Leaderboard %s %s", method, url)
        try:
            resp = self.session.request(method=method, url=url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("Leaderboard request failed: %s", exc)
            raise TransportError(f"Could not reach {url}: {exc}") from exc
        if resp.status_code == 400:
            raise ValidationError(self._error_message(resp))
        if resp.status_code == 404:
            raise NotFoundError(self._error_message(resp))
        if resp.status_code >= 400:
            logger.error("Leaderboard API error %s: %s", resp.status_code, resp.text)
            raise TransportError(f"Leaderboard API error {resp.status_code}: {resp.text}")
        return resp

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        try:
            return resp.json().get("error") or resp.text
        except ValueError:
            return resp.text

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise TransportError(f"Invalid JSON from leaderboard: {resp.text[:200]}") from exc

    # ---------- Leaderboard ----------
    def list(self) -> List[BoardEntry]:
        resp = self._request("GET", "/api/leaderboard")
        return [BoardEntry.from_dict(item) for item in self._json(resp)]

    def insert(self, name: str, time_ms: int) -> BoardEntry:
        resp = self._request("POST", "/api/leaderboard", json={"name": name, "timeMs": time_ms})
        return BoardEntry.from_dict(self._json(resp))

    def update(self, entry_id: str, name: Optional[str] = None, time_ms: Optional[int] = None) -> BoardEntry:
        payload: Dict[str, Any] = {}
        if name is not None:
            payload["name"] = name
        if time_ms is not None:
            payload["timeMs"] = time_ms
        resp = self._request("PUT", f"/api/leaderboard/{entry_id}", json=payload)
        return BoardEntry.from_dict(self._json(resp))

    def delete(self, entry_id: str) -> BoardEntry:
        resp = self._request("DELETE", f"/api/leaderboard/{entry_id}")
        return BoardEntry.from_dict(self._json(resp))

    # ---------- Simulation ----------
    def trigger_interrupt(self) -> Dict[str, Any]:
        resp = self._request("POST", "/api/test-interrupt")
        return self._json(resp)
