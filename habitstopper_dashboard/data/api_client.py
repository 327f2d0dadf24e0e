from __future__ import annotations

import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    def __init__(self, status_code: int | None, detail: Any):
        super().__init__(f"API error {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail

    def detail_text(self) -> str:
        if isinstance(self.detail, dict):
            return str(self.detail.get("error") or self.detail.get("detail") or self.detail)
        return str(self.detail)


class Unauthorized(ApiError):
    pass


def build_session() -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "POST"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=4, pool_maxsize=4)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class ApiClient:
    """Calls the HabitStopper API on behalf of one signed-in Streamlit user.

    ``identity`` carries the Google ``sub``, ``email`` and ``name`` that
    Streamlit's login established; the API trusts them because the request
    also carries the shared backend token.
    """

    def __init__(self, base_url: str, backend_token: str, identity: dict, session: requests.Session | None = None, timeout: int = 10):
        self.base_url = (base_url or "").rstrip("/")
        self.backend_token = backend_token or ""
        self.identity = identity or {}
        self.timeout = timeout
        self._session = session or build_session()

    def is_enabled(self) -> bool:
        return bool(self.base_url and self.backend_token)

    def _headers(self) -> dict:
        if not self.identity.get("sub"):
            raise Unauthorized(401, "Missing user identity for API request")
        headers = {
            "X-Backend-Token": self.backend_token,
            "X-User-Subject": str(self.identity["sub"]),
        }
        if self.identity.get("email"):
            headers["X-User-Email"] = str(self.identity["email"])
        if self.identity.get("name"):
            headers["X-User-Name"] = str(self.identity["name"])
        return headers

    def request(self, method: str, path: str, json: dict | None = None) -> Any:
        if not self.base_url:
            raise RuntimeError("API_BASE_URL not configured")
        if not self.backend_token:
            raise RuntimeError("BACKEND_SESSION_SECRET not configured")
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, json=json, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(None, str(exc)) from exc
        if not response.ok:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            error_cls = Unauthorized if response.status_code == 401 else ApiError
            raise error_cls(response.status_code, detail)
        if response.status_code == 204:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body", method, path)
            raise ApiError(response.status_code, response.text) from exc

    def end_session(self) -> None:
        """Clear any API session cookie this client holds."""
        if not self.base_url:
            return
        try:
            self._session.request(
                "GET", f"{self.base_url}/auth/logout", timeout=self.timeout, allow_redirects=False
            )
        except requests.RequestException as exc:
            raise ApiError(None, str(exc)) from exc

    def current_user(self) -> dict | None:
        return self.request("GET", "/api/current_user")

    def list_logs(self) -> list[dict]:
        return self.request("GET", "/api/logs") or []

    def set_status(self, day_iso: str, status: str) -> dict:
        return self.request("POST", "/api/log", json={"date": day_iso, "status": status})
