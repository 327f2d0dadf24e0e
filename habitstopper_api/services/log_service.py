from __future__ import annotations

import logging
import re
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from habitstopper_api.errors import InvalidArgument, StoreUnavailable, Unauthorized
from habitstopper_api.repositories import LogStore
from habitstopper_api.schemas import LOG_STATUSES, DailyLog

logger = logging.getLogger(__name__)

DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_date_key(value) -> str:
    if not isinstance(value, str) or not DATE_KEY_PATTERN.match(value):
        raise InvalidArgument("date must be formatted as YYYY-MM-DD")
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidArgument(f"{value} is not a calendar day") from exc
    return value


def validate_status(value) -> str:
    if value not in LOG_STATUSES:
        raise InvalidArgument("status must be one of: " + ", ".join(LOG_STATUSES))
    return value


def _require_user(user_id) -> str:
    if not user_id:
        raise Unauthorized()
    return str(user_id)


class LogService:
    """Daily log reads and the one-record-per-day write."""

    def __init__(self, store: LogStore):
        self._store = store

    async def list_logs(self, user_id: str | None) -> list[DailyLog]:
        owner = _require_user(user_id)
        try:
            rows = await self._store.list_for_user(owner)
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("Listing logs failed for user %s", owner)
            raise StoreUnavailable() from exc
        return [DailyLog(**row) for row in rows]

    async def set_status(self, user_id: str | None, day_iso, status) -> DailyLog:
        owner = _require_user(user_id)
        day_iso = validate_date_key(day_iso)
        status = validate_status(status)
        try:
            row = await self._store.upsert(owner, day_iso, status)
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("Writing log %s failed for user %s", day_iso, owner)
            raise StoreUnavailable() from exc
        logger.info("Stored %s for user %s on %s", status, owner, day_iso)
        return DailyLog(**row)
