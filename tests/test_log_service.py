import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from habitstopper_api.db import build_engine, build_sessionmaker, normalize_database_url
from habitstopper_api.db_init import init_db
from habitstopper_api.errors import InvalidArgument, StoreUnavailable, Unauthorized
from habitstopper_api.repositories import LogStore, UserStore
from habitstopper_api.services.log_service import LogService


class RecordingStore:
    """Stands in for LogStore and remembers every call it receives."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    async def list_for_user(self, user_id):
        self.calls.append(("list", user_id))
        if self.error:
            raise self.error
        return []

    async def upsert(self, user_id, day_iso, status):
        self.calls.append(("upsert", user_id, day_iso, status))
        if self.error:
            raise self.error
        return {"user_id": user_id, "date": day_iso, "status": status, "updated_at": "2024-03-05T10:00:00+00:00"}


def run_with_store(settings, scenario):
    """Run ``scenario(service, log_store, user_id)`` against a fresh SQLite store."""

    async def runner():
        engine = build_engine(settings)
        try:
            await init_db(engine)
            session_factory = build_sessionmaker(engine)
            user, _ = await UserStore(session_factory).find_or_create_by_google_id(
                "google-123", "Ana Souza", "ana@example.com"
            )
            log_store = LogStore(session_factory)
            return await scenario(LogService(log_store), log_store, user["id"])
        finally:
            await engine.dispose()

    return asyncio.run(runner())


def test_setting_same_status_twice_keeps_one_record(settings):
    async def scenario(service, store, user_id):
        await service.set_status(user_id, "2024-03-05", "success")
        await service.set_status(user_id, "2024-03-05", "success")
        return await store.list_for_user(user_id)

    rows = run_with_store(settings, scenario)

    assert [(row["date"], row["status"]) for row in rows] == [("2024-03-05", "success")]


def test_later_write_overwrites_status(settings):
    async def scenario(service, store, user_id):
        await service.set_status(user_id, "2024-03-05", "success")
        stored = await service.set_status(user_id, "2024-03-05", "failed")
        return stored, await service.list_logs(user_id)

    stored, logs = run_with_store(settings, scenario)

    assert stored.status == "failed"
    assert [(log.date, log.status) for log in logs] == [("2024-03-05", "failed")]


def test_concurrent_writes_leave_one_record(settings):
    async def scenario(service, store, user_id):
        statuses = ["success" if idx % 2 else "failed" for idx in range(12)]
        await asyncio.gather(*(service.set_status(user_id, "2024-03-05", status) for status in statuses))
        return await store.list_for_user(user_id)

    rows = run_with_store(settings, scenario)

    assert len(rows) == 1
    assert rows[0]["status"] in {"success", "failed"}


def test_logs_are_scoped_to_their_owner(settings):
    async def scenario(service, store, user_id):
        await service.set_status(user_id, "2024-03-01", "success")
        await service.set_status("someone-else", "2024-03-01", "failed")
        await service.set_status(user_id, "2024-03-02", "failed")
        return await service.list_logs(user_id)

    logs = run_with_store(settings, scenario)

    assert [(log.date, log.status) for log in logs] == [("2024-03-01", "success"), ("2024-03-02", "failed")]


@pytest.mark.parametrize("user_id", [None, ""])
def test_missing_identity_is_unauthorized_and_never_touches_store(user_id):
    store = RecordingStore()
    service = LogService(store)

    with pytest.raises(Unauthorized):
        asyncio.run(service.set_status(user_id, "2024-03-05", "success"))
    with pytest.raises(Unauthorized):
        asyncio.run(service.list_logs(user_id))
    assert store.calls == []


@pytest.mark.parametrize("bad_date", ["03-05-2024", "2024-3-5", "2024-02-30", "2024-03-05T00:00:00", "", None, 20240305])
def test_malformed_date_is_rejected_before_store(bad_date):
    store = RecordingStore()

    with pytest.raises(InvalidArgument):
        asyncio.run(LogService(store).set_status("user-1", bad_date, "success"))
    assert store.calls == []


@pytest.mark.parametrize("bad_status", ["done", "SUCCESS", "", None])
def test_unknown_status_is_rejected_before_store(bad_status):
    store = RecordingStore()

    with pytest.raises(InvalidArgument):
        asyncio.run(LogService(store).set_status("user-1", "2024-03-05", bad_status))
    assert store.calls == []


def test_store_failures_surface_as_store_unavailable():
    store = RecordingStore(error=OperationalError("INSERT", {}, Exception("database is down")))
    service = LogService(store)

    with pytest.raises(StoreUnavailable):
        asyncio.run(service.set_status("user-1", "2024-03-05", "success"))
    with pytest.raises(StoreUnavailable):
        asyncio.run(service.list_logs("user-1"))
    assert len(store.calls) == 2


def test_find_or_create_user_creates_once(settings):
    async def scenario():
        engine = build_engine(settings)
        try:
            await init_db(engine)
            users = UserStore(build_sessionmaker(engine))
            first, first_created = await users.find_or_create_by_google_id("g-1", "Ana", "ana@example.com")
            second, second_created = await users.find_or_create_by_google_id("g-1", "Renamed", "other@example.com")
            return first, first_created, second, second_created
        finally:
            await engine.dispose()

    first, first_created, second, second_created = asyncio.run(scenario())

    assert first_created is True
    assert second_created is False
    assert second["id"] == first["id"]
    assert second["name"] == "Ana"
    assert first["joined"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("postgres://u:p@db.example.com/app?sslmode=require", "postgresql+asyncpg://u:p@db.example.com/app?ssl=true"),
        ("postgresql://u:p@localhost/app", "postgresql+asyncpg://u:p@localhost/app"),
        ("sqlite:///./habitstopper.db", "sqlite+aiosqlite:///./habitstopper.db"),
        ("sqlite+aiosqlite:///./habitstopper.db", "sqlite+aiosqlite:///./habitstopper.db"),
    ],
)
def test_database_urls_are_normalized_for_async_drivers(raw, expected):
    assert normalize_database_url(raw) == expected
