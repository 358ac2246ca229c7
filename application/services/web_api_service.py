"""
web-api 应用服务 - 事件增删查 + 会话操作透传
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
import uuid

from application.dto import EventDTO
from domain.account.entity import Credentials, Token
from domain.account.service import AccountService
from domain.calendar.entity import Event
from domain.calendar.repository import EventRepository
from domain.common.exceptions import DomainValidationException, EventNotFoundException
from domain.web_api.service import WebApiService
from core.logging_config import get_logger
from infrastructure.cache.redis_client import CacheInterface


logger = get_logger(__name__)

EVENTS_KEY_PREFIX = "events:user:"


def events_key(user_id: int) -> str:
    return f"{EVENTS_KEY_PREFIX}{user_id}"


def _event_from_cache(item: dict) -> Event:
    dto = EventDTO.model_validate(item)
    return Event(
        id=dto.id,
        user_id=dto.user_id,
        title=dto.title,
        description=dto.description,
        starts_at=dto.starts_at,
        ends_at=dto.ends_at,
        created_at=dto.created_at,
    )


class WebApiApplicationService(WebApiService):

    def __init__(
        self,
        events: EventRepository,
        account: AccountService,
        cache: Optional[CacheInterface] = None,
        list_ttl_seconds: int = 60,
    ):
        self._events = events
        self._account = account
        # 可选的按用户列表缓存；增删事件时失效
        self._cache = cache
        self._list_ttl = list_ttl_seconds
        # 每个用户的失效计数；读库期间若有增删，本次结果不回填缓存
        self._generations: Dict[int, int] = {}

    async def add_event(self, event: Event) -> str:
        try:
            event.validate()
        except ValueError as exc:
            raise DomainValidationException(str(exc))
        event.id = uuid.uuid4().hex
        event.created_at = datetime.now(timezone.utc)
        saved = await self._events.create(event)
        await self._invalidate(saved.user_id)
        logger.info("event_added", event_id=saved.id, user_id=saved.user_id)
        return saved.id

    async def list_event(self, user_id: int) -> List[Event]:
        if self._cache is not None:
            cached = await self._cache.get(events_key(user_id))
            if cached is not None:
                return [_event_from_cache(item) for item in cached]
        generation = self._generations.get(user_id, 0)
        events = await self._events.list_by_user(user_id)
        if self._cache is not None:
            await self._fill(user_id, generation, events)
        return events

    async def delete_event(self, event_id: str, user_id: int) -> None:
        if not await self._events.delete(event_id, user_id):
            raise EventNotFoundException(event_id, user_id)
        await self._invalidate(user_id)
        logger.info("event_deleted", event_id=event_id, user_id=user_id)

    async def _fill(self, user_id: int, generation: int, events: List[Event]) -> None:
        if self._generations.get(user_id, 0) != generation:
            logger.debug("events_cache_fill_skipped", user_id=user_id)
            return
        payload = [EventDTO.model_validate(e).model_dump(mode="json") for e in events]
        await self._cache.set(events_key(user_id), payload, ttl=self._list_ttl)
        # 写入期间发生的失效可能先于 SET 到达
        if self._generations.get(user_id, 0) != generation:
            await self._cache.delete(events_key(user_id))

    async def _invalidate(self, user_id: int) -> None:
        if self._cache is not None:
            self._generations[user_id] = self._generations.get(user_id, 0) + 1
            await self._cache.delete(events_key(user_id))

    # 会话操作全部委托给 account 服务

    async def sign_up(self, user: Credentials) -> Tuple[int, Token]:
        return await self._account.sign_up(user)

    async def login(self, user: Credentials) -> Tuple[int, Token]:
        return await self._account.login(user)

    async def logout(self, token: Token) -> None:
        await self._account.logout(token)
