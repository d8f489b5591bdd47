"""HTTP client for the health calculator API."""

from __future__ import annotations

import os
import time
from typing import Any, Callable, Optional

import requests


BASE_URL = os.getenv("HEALTHCALC_API_BASE_URL", "http://127.0.0.1:5000")
DEFAULT_TIMEOUT = 30
SESSION_CACHE_TTL = 60.0


class ApiError(Exception):
    """A non-2xx response from the API, carrying its status and message."""

    def __init__(self, status: int, message: str, details: Optional[list] = None):
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.message = message
        self.details = details or []


class SessionCache:
    """Time-boxed memo of the signed-in user.

    Owned by whichever component builds the client; entries older than ``ttl``
    seconds are treated as missing.
    """

    def __init__(self, ttl: float = SESSION_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._user: Optional[dict] = None
        self._stored_at: Optional[float] = None

    def get(self) -> Optional[dict]:
        if self._stored_at is None:
            return None
        if self._clock() - self._stored_at >= self.ttl:
            self.clear()
            return None
        return self._user

    def set(self, user: Optional[dict]) -> None:
        self._user = user
        self._stored_at = self._clock()

    def clear(self) -> None:
        self._user = None
        self._stored_at = None


def _json_or_error(res: requests.Response) -> dict:
    try:
        payload = res.json()
    except ValueError:
        payload = None

    if res.ok:
        if not isinstance(payload, dict):
            raise ApiError(res.status_code, f"Unexpected response (non-JSON): {res.text[:500]}")
        return payload

    if isinstance(payload, dict):
        raise ApiError(res.status_code, str(payload.get("error", res.reason)), payload.get("details"))
    raise ApiError(res.status_code, res.text[:500] or str(res.reason))


class HealthCalcClient:
    """Thin wrapper over the JSON API that keeps the session cookie between calls."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        http: Optional[requests.Session] = None,
        cache: Optional[SessionCache] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.cache = cache if cache is not None else SessionCache()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        res = self.http.request(
            method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
        )
        return _json_or_error(res)

    def send_code(self, email: str, purpose: str = "register") -> dict:
        return self._request("POST", "/auth/send-code", json={"email": email, "purpose": purpose})

    def register(self, email: str, username: str, password: str, code: str) -> dict:
        data = self._request(
            "POST",
            "/auth/register",
            json={"email": email, "username": username, "password": password, "code": code},
        )
        self.cache.clear()
        return data

    def login(self, username: str, password: str) -> dict:
        data = self._request(
            "POST", "/auth/login", json={"username": username, "password": password}
        )
        self.cache.clear()
        return data

    def logout(self) -> dict:
        try:
            return self._request("POST", "/auth/logout")
        finally:
            self.cache.clear()

    def current_user(self, force: bool = False) -> Optional[dict]:
        """Return the signed-in user, serving from the cache while it is fresh."""

        if not force:
            cached = self.cache.get()
            if cached is not None:
                return cached
        try:
            user = self._request("GET", "/auth/me")["user"]
        except ApiError as exc:
            if exc.status != 401:
                raise
            self.cache.clear()
            return None
        self.cache.set(user)
        return user

    def calculate(self, kind: str, **fields: Any) -> dict:
        return self._request("POST", f"/calculate/{kind}", json=fields)

    def records(self, kind: str, limit: int = 10, page: int = 1) -> list:
        data = self._request(
            "GET", f"/calculate/{kind}", params={"limit": limit, "page": page}
        )
        return data["records"]

    def dashboard(self) -> dict:
        return self._request("GET", "/calculate/dashboard")
