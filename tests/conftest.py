"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings, and provide
in-memory doubles for the cache and repositories.
"""
import os
from typing import Any, Dict, List, Optional

import pytest

# Mandatory values for the service config sections
os.environ.setdefault("ACCOUNT_SERVICE__SECRET_KEY", "test-secret-key")
os.environ.setdefault("ACCOUNT_SERVICE__DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("WEB_API_SERVICE__DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "logfmt")

from domain.account.entity import User  # noqa: E402
from domain.account.repository import AccountRepository  # noqa: E402
from domain.calendar.entity import Event  # noqa: E402
from domain.calendar.repository import EventRepository  # noqa: E402
from domain.common.exceptions import UsernameAlreadyExistsException  # noqa: E402
from infrastructure.cache.redis_client import CacheInterface  # noqa: E402


class FakeCache(CacheInterface):
    """In-memory CacheInterface with TTL bookkeeping (values are never serialized)."""

    def __init__(self, healthy: bool = True):
        self.data: Dict[str, Any] = {}
        self.ttl: Dict[str, Optional[int]] = {}
        self.healthy = healthy
        self.fail_writes = False
        self.closed = False

    async def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if self.fail_writes:
            return False
        self.data[key] = value
        self.ttl[key] = ttl
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttl.pop(key, None)
        return removed

    async def exists(self, *keys: str) -> int:
        return sum(1 for k in keys if k in self.data)

    async def health_check(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        self.closed = True


class InMemoryAccountRepository(AccountRepository):
    def __init__(self):
        self.users: Dict[int, User] = {}
        self.healthy = True

    async def create(self, user: User) -> User:
        if any(u.username == user.username for u in self.users.values()):
            raise UsernameAlreadyExistsException(user.username)
        user.id = len(self.users) + 1
        self.users[user.id] = user
        return user

    async def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)

    async def exists_by_username(self, username: str) -> bool:
        return await self.get_by_username(username) is not None

    async def ping(self) -> bool:
        return self.healthy


class InMemoryEventRepository(EventRepository):
    def __init__(self):
        self.events: Dict[str, Event] = {}
        self.list_calls = 0

    async def create(self, event: Event) -> Event:
        self.events[event.id] = event
        return event

    async def list_by_user(self, user_id: int) -> List[Event]:
        self.list_calls += 1
        owned = [e for e in self.events.values() if e.user_id == user_id]
        return sorted(owned, key=lambda e: (e.starts_at, e.id))

    async def delete(self, event_id: str, user_id: int) -> bool:
        event = self.events.get(event_id)
        if event is None or event.user_id != user_id:
            return False
        del self.events[event_id]
        return True

    async def ping(self) -> bool:
        return True


@pytest.fixture
def fake_cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def account_repo() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def event_repo() -> InMemoryEventRepository:
    return InMemoryEventRepository()


@pytest.fixture
def fake_cache_connector(fake_cache):
    """Drop-in for connect_redis used by the composition roots."""
    async def _connect(_cfg, *, timeout: float = 5.0):
        return fake_cache
    return _connect


@pytest.fixture
def token_service():
    from application.services.token_service import TokenService

    return TokenService("test-secret-key", ttl_seconds=60)


@pytest.fixture
def account_service(account_repo, fake_cache, token_service):
    from application.services.account_service import AccountApplicationService

    return AccountApplicationService(account_repo, fake_cache, token_service)

