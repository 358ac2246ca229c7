from datetime import datetime, timedelta, timezone

import pytest

from core.config import DatabaseSettings
from core.exceptions import DatabaseConnectionError
from domain.account.entity import User
from domain.calendar.entity import Event
from domain.common.exceptions import UsernameAlreadyExistsException
from infrastructure.database import _build_async_url, new_connection
from infrastructure.repositories.account_repository import SQLAlchemyAccountRepository
from infrastructure.repositories.event_repository import SQLAlchemyEventRepository


pytestmark = pytest.mark.asyncio

T0 = datetime(2026, 3, 1, 9, 0)


@pytest.fixture
async def db(tmp_path):
    cfg = DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'calendar.db'}", create_tables=True)
    database = await new_connection(cfg, timeout=5)
    try:
        yield database
    finally:
        await database.dispose()


async def test_account_repository_crud(db):
    repo = SQLAlchemyAccountRepository(db)

    created = await repo.create(User(id=None, username="alice", hashed_password="h", created_at=datetime.now(timezone.utc)))

    assert created.id is not None
    assert (await repo.get_by_username("alice")).id == created.id
    assert await repo.exists_by_username("alice")
    assert not await repo.exists_by_username("bob")
    assert await repo.get_by_username("bob") is None
    assert await repo.ping()


async def test_account_repository_unique_username(db):
    repo = SQLAlchemyAccountRepository(db)
    await repo.create(User(id=None, username="alice", hashed_password="h"))

    with pytest.raises(UsernameAlreadyExistsException):
        await repo.create(User(id=None, username="alice", hashed_password="h2"))


async def test_event_repository_list_and_delete(db):
    repo = SQLAlchemyEventRepository(db)
    for idx, offset in enumerate((2, 0, 1)):
        await repo.create(Event(
            id=f"e{idx}",
            user_id=1,
            title=f"event {idx}",
            starts_at=T0 + timedelta(hours=offset),
            ends_at=T0 + timedelta(hours=offset, minutes=30),
            created_at=T0,
        ))
    await repo.create(Event(id="other", user_id=2, title="x", starts_at=T0, ends_at=T0, created_at=T0))

    listed = await repo.list_by_user(1)
    assert [e.id for e in listed] == ["e1", "e2", "e0"]

    assert not await repo.delete("e1", user_id=2)
    assert await repo.delete("e1", user_id=1)
    assert not await repo.delete("e1", user_id=1)
    assert [e.id for e in await repo.list_by_user(1)] == ["e2", "e0"]


async def test_new_connection_fails_for_unreachable_database(tmp_path):
    cfg = DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}")

    with pytest.raises(DatabaseConnectionError) as ei:
        await new_connection(cfg, timeout=5)
    assert ei.value.during == "Connect"


async def test_new_connection_rejects_unknown_driver():
    with pytest.raises(DatabaseConnectionError):
        await new_connection(DatabaseSettings(url="oracle://db/x"), timeout=1)


async def test_build_async_url():
    assert _build_async_url("postgresql://u:p@db/x") == "postgresql+asyncpg://u:p@db/x"
    assert _build_async_url("sqlite:///x.db") == "sqlite+aiosqlite:///x.db"
    assert _build_async_url("postgresql+asyncpg://db/x") == "postgresql+asyncpg://db/x"
