from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Optional, Protocol

from habitstopper_dashboard import calendar_view
from habitstopper_dashboard.data.api_client import ApiError, Unauthorized

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"
AUTHENTICATED = "authenticated"

RECORDABLE_STATUSES = (calendar_view.STATUS_SUCCESS, calendar_view.STATUS_FAILED)


class LogGateway(Protocol):
    def list_logs(self) -> list[dict]: ...

    def set_status(self, day_iso: str, status: str) -> dict: ...

    def end_session(self) -> None: ...


@dataclass
class ClientState:
    user: Optional[Dict[str, Any]] = None
    logs: Dict[str, str] = field(default_factory=dict)
    year: int = 1970
    month: int = 1
    # date key -> status held before the in-flight write (None if there was none)
    pending: Dict[str, Optional[str]] = field(default_factory=dict)
    last_error: Optional[str] = None

    @property
    def phase(self) -> str:
        return AUTHENTICATED if self.user else ANONYMOUS

    def log_list(self) -> list[dict]:
        return [{"date": key, "status": status} for key, status in sorted(self.logs.items())]


class ClientController:
    """Drives ``ClientState`` through login, logging and month navigation."""

    def __init__(self, state: ClientState, gateway: LogGateway, clock: Callable[[], date] = date.today):
        self.state = state
        self._gateway = gateway
        self._clock = clock

    def _require_authenticated(self) -> None:
        if self.state.phase != AUTHENTICATED:
            raise Unauthorized(401, "Login required")

    def _fetch_logs(self) -> Dict[str, str]:
        return {item["date"]: item["status"] for item in self._gateway.list_logs() or []}

    def login(self, user: Dict[str, Any]) -> None:
        # The log set is fetched before the user is attached, so a failed
        # fetch leaves the state anonymous.
        logs = self._fetch_logs()
        today = self._clock()
        self.state.user = dict(user)
        self.state.logs = logs
        self.state.pending = {}
        self.state.last_error = None
        self.state.year, self.state.month = today.year, today.month
        logger.info("Logged in %s with %d logs", user.get("email") or user.get("id"), len(logs))

    def logout(self) -> None:
        self.state.user = None
        self.state.logs = {}
        self.state.pending = {}
        self.state.last_error = None
        try:
            self._gateway.end_session()
        except ApiError as exc:
            # Local state is already anonymous.
            logger.warning("Could not end server session: %s", exc)

    def refresh(self) -> None:
        self._require_authenticated()
        self.state.logs = self._fetch_logs()
        self.state.pending = {}

    def today_key(self) -> str:
        return self._clock().isoformat()

    def record_today(self, status: str) -> dict:
        """Optimistically mark today, then confirm with the server or revert."""
        self._require_authenticated()
        if status not in RECORDABLE_STATUSES:
            raise ValueError(f"status must be one of {RECORDABLE_STATUSES}")
        key = self.today_key()
        previous = self.state.pending.get(key, self.state.logs.get(key))
        self.state.pending[key] = previous
        self.state.logs[key] = status
        try:
            stored = self._gateway.set_status(key, status)
            if not isinstance(stored, dict):
                raise ApiError(None, "Server returned no log record")
        except ApiError as exc:
            self._fail_write(key, previous, exc)
            if exc.status_code == 401:
                self.logout()
            raise
        except Exception as exc:
            error = ApiError(None, str(exc) or type(exc).__name__)
            self._fail_write(key, previous, error)
            raise error from exc
        self.state.pending.pop(key, None)
        self.state.logs[stored.get("date", key)] = stored.get("status", status)
        self.state.last_error = None
        return stored

    def _fail_write(self, key: str, previous: Optional[str], exc: ApiError) -> None:
        self._revert(key, previous)
        self.state.last_error = exc.detail_text()
        logger.warning("Write for %s failed, reverted local entry: %s", key, exc)

    def _revert(self, key: str, previous: Optional[str]) -> None:
        self.state.pending.pop(key, None)
        if previous is None:
            self.state.logs.pop(key, None)
        else:
            self.state.logs[key] = previous

    def change_displayed_month(self, delta: int) -> tuple[int, int]:
        self.state.year, self.state.month = calendar_view.shift_month(self.state.year, self.state.month, delta)
        return self.state.year, self.state.month

    def calendar(self) -> list:
        return calendar_view.materialize(
            self.state.year, self.state.month, self.state.log_list(), today=self._clock()
        )
