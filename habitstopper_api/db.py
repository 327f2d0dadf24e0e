from __future__ import annotations

import logging
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine

from habitstopper_api.settings import Settings

logger = logging.getLogger(__name__)


def normalize_database_url(database_url: str) -> str:
    url = str(database_url or "").strip()
    if not url:
        return url
    if url.startswith("postgres://"):
        url = "postgresql+asyncpg://" + url[len("postgres://") :]
    elif url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://") :]
    elif url.startswith("postgresql+psycopg2://"):
        url = "postgresql+asyncpg://" + url[len("postgresql+psycopg2://") :]
    elif url.startswith("sqlite://") and not url.startswith("sqlite+aiosqlite://"):
        url = "sqlite+aiosqlite://" + url[len("sqlite://") :]
    if not url.startswith("postgresql+asyncpg://"):
        return url
    try:
        parsed = urlparse(url)
        query_items = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True)]
        clean = []
        ssl_requested = False
        for key, value in query_items:
            if key == "sslmode":
                ssl_requested = True
                continue
            if key in {"channel_binding", "ssl"}:
                continue
            clean.append((key, value))
        if ssl_requested:
            clean.append(("ssl", "true"))
        parsed = parsed._replace(query=urlencode(clean))
        url = urlunparse(parsed)
    except ValueError:
        return url
    return url


def using_sqlite(database_url: str) -> bool:
    return str(database_url).strip().lower().startswith("sqlite")


def build_engine(settings: Settings) -> AsyncEngine:
    db_url = normalize_database_url(settings.database_url)
    if using_sqlite(db_url):
        logger.info("Using SQLite log store at %s", db_url)
        return create_async_engine(db_url, future=True)
    connect_args: dict = {}
    host = urlparse(db_url).hostname or ""
    if host and host not in {"localhost", "127.0.0.1"}:
        connect_args["ssl"] = True
    engine_kwargs = {"pool_pre_ping": True, "future": True, "pool_size": 10, "max_overflow": 5}
    if connect_args:
        return create_async_engine(db_url, connect_args=connect_args, **engine_kwargs)
    return create_async_engine(db_url, **engine_kwargs)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)
