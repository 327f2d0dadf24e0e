from __future__ import annotations

from sqlalchemy import text as sql_text
from sqlalchemy.ext.asyncio import AsyncEngine


USERS_TABLE = "users"
LOGS_TABLE = "daily_logs"


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
                    id TEXT PRIMARY KEY,
                    google_id TEXT,
                    name TEXT,
                    email TEXT,
                    joined TEXT NOT NULL
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {LOGS_TABLE} (
                    user_id TEXT NOT NULL REFERENCES {USERS_TABLE} (id),
                    date TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'success',
                    updated_at TEXT NOT NULL,
                    CHECK (status IN ('success', 'failed'))
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"CREATE UNIQUE INDEX IF NOT EXISTS idx_{USERS_TABLE}_google_id "
                f"ON {USERS_TABLE} (google_id)"
            )
        )
        await conn.execute(
            sql_text(
                f"CREATE UNIQUE INDEX IF NOT EXISTS idx_{LOGS_TABLE}_user_date "
                f"ON {LOGS_TABLE} (user_id, date)"
            )
        )
