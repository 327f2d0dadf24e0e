from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text
from sqlalchemy.ext.asyncio import async_sessionmaker

from habitstopper_api.db_init import LOGS_TABLE, USERS_TABLE

USER_SELECT_COLUMNS = ["id", "google_id", "name", "email", "joined"]
LOG_SELECT_COLUMNS = ["user_id", "date", "status", "updated_at"]


def _new_id() -> str:
    return uuid4().hex


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _normalize_row(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    for key in ("joined", "updated_at"):
        value = payload.get(key)
        if value is not None and hasattr(value, "isoformat"):
            payload[key] = value.isoformat()
    return payload


class UserStore:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def get(self, user_id: str) -> dict:
        async with self._session_factory() as session:
            row = (await session.execute(
                sql_text(f"SELECT {', '.join(USER_SELECT_COLUMNS)} FROM {USERS_TABLE} WHERE id = :id"),
                {"id": user_id},
            )).mappings().fetchone()
        return _normalize_row(row)

    async def get_by_google_id(self, google_id: str) -> dict:
        async with self._session_factory() as session:
            row = (await session.execute(
                sql_text(
                    f"SELECT {', '.join(USER_SELECT_COLUMNS)} FROM {USERS_TABLE} "
                    "WHERE google_id = :google_id"
                ),
                {"google_id": google_id},
            )).mappings().fetchone()
        return _normalize_row(row)

    async def find_or_create_by_google_id(self, google_id: str, name: str | None, email: str | None) -> tuple[dict, bool]:
        """Return ``(user, created)``. An existing user is returned untouched."""
        async with self._session_factory() as session:
            result = await session.execute(
                sql_text(
                    f"""
                    INSERT INTO {USERS_TABLE} (id, google_id, name, email, joined)
                    VALUES (:id, :google_id, :name, :email, :joined)
                    ON CONFLICT(google_id) DO NOTHING
                    """
                ),
                {
                    "id": _new_id(),
                    "google_id": google_id,
                    "name": name,
                    "email": email,
                    "joined": _utcnow_iso(),
                },
            )
            await session.commit()
        created = bool(result.rowcount)
        return await self.get_by_google_id(google_id), created


class LogStore:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def list_for_user(self, user_id: str) -> list[dict]:
        async with self._session_factory() as session:
            rows = (await session.execute(
                sql_text(
                    f"""
                    SELECT {', '.join(LOG_SELECT_COLUMNS)}
                    FROM {LOGS_TABLE}
                    WHERE user_id = :user_id
                    ORDER BY date
                    """
                ),
                {"user_id": user_id},
            )).mappings().all()
        return [_normalize_row(row) for row in rows]

    async def upsert(self, user_id: str, day_iso: str, status: str) -> dict:
        """Write the single record for ``(user_id, day_iso)``; the last commit wins."""
        payload = {
            "user_id": user_id,
            "date": day_iso,
            "status": status,
            "updated_at": _utcnow_iso(),
        }
        async with self._session_factory() as session:
            await session.execute(
                sql_text(
                    f"""
                    INSERT INTO {LOGS_TABLE} (user_id, date, status, updated_at)
                    VALUES (:user_id, :date, :status, :updated_at)
                    ON CONFLICT(user_id, date) DO UPDATE SET
                        status=EXCLUDED.status,
                        updated_at=EXCLUDED.updated_at
                    """
                ),
                payload,
            )
            await session.commit()
        return payload

