import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from application.dto import DeleteEventRequest, EventDTO, ListEventRequest
from application.endpoints.web_api import make_web_api_endpoints
from application.services.web_api_service import WebApiApplicationService, events_key
from domain.account.entity import Credentials
from domain.calendar.entity import Event
from domain.common.exceptions import DomainValidationException, EventNotFoundException


pytestmark = pytest.mark.asyncio

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _event(user_id=1, title="standup", start=T0, minutes=30) -> Event:
    return Event(id=None, user_id=user_id, title=title, starts_at=start, ends_at=start + timedelta(minutes=minutes))


@pytest.fixture
def web_api(event_repo, account_service, fake_cache):
    return WebApiApplicationService(event_repo, account_service, fake_cache, list_ttl_seconds=30)


async def test_add_event_assigns_id(web_api, event_repo):
    event_id = await web_api.add_event(_event())

    assert len(event_id) == 32
    stored = event_repo.events[event_id]
    assert stored.created_at is not None


async def test_add_event_validates(web_api):
    with pytest.raises(DomainValidationException):
        await web_api.add_event(_event(title="   "))
    with pytest.raises(DomainValidationException):
        await web_api.add_event(_event(minutes=-5))


async def test_list_event_is_ordered_and_scoped(web_api):
    later = await web_api.add_event(_event(title="later", start=T0 + timedelta(hours=2)))
    earlier = await web_api.add_event(_event(title="earlier"))
    await web_api.add_event(_event(user_id=2, title="someone else"))

    events = await web_api.list_event(1)

    assert [e.id for e in events] == [earlier, later]


async def test_list_event_uses_cache_until_invalidated(web_api, event_repo, fake_cache):
    await web_api.add_event(_event())

    first = await web_api.list_event(1)
    second = await web_api.list_event(1)

    assert event_repo.list_calls == 1
    assert fake_cache.ttl[events_key(1)] == 30
    assert [e.id for e in second] == [e.id for e in first]
    assert second[0].starts_at == T0

    await web_api.add_event(_event(title="new", start=T0 + timedelta(days=1)))
    assert events_key(1) not in fake_cache.data
    assert len(await web_api.list_event(1)) == 2
    assert event_repo.list_calls == 2


async def test_delete_event_only_for_owner(web_api):
    event_id = await web_api.add_event(_event())

    with pytest.raises(EventNotFoundException):
        await web_api.delete_event(event_id, user_id=2)

    await web_api.delete_event(event_id, user_id=1)
    assert await web_api.list_event(1) == []

    with pytest.raises(EventNotFoundException):
        await web_api.delete_event(event_id, user_id=1)


async def test_session_operations_are_delegated(web_api, account_service):
    uid, token = await web_api.sign_up(Credentials("bob", "secret1"))
    assert await account_service.is_auth(token) == token

    login_id, token2 = await web_api.login(Credentials("bob", "secret1"))
    assert login_id == uid

    await web_api.logout(token2)
    assert await account_service.is_auth(token) == token


async def test_endpoints_round_trip_messages(web_api):
    eps = make_web_api_endpoints(web_api)

    reply = await eps.add_event(EventDTO(user_id=1, title="review", starts_at=T0, ends_at=T0 + timedelta(hours=1)))
    listed = await eps.list_event(ListEventRequest(user_id=1))

    assert [e.id for e in listed.events] == [reply.id]
    assert listed.events[0].title == "review"

    await eps.delete_event(DeleteEventRequest(event_id=reply.id, user_id=1))
    assert (await eps.list_event(ListEventRequest(user_id=1))).events == []


async def test_list_racing_an_add_does_not_cache_stale_events(web_api, event_repo, fake_cache):
    first = await web_api.add_event(_event(title="first"))
    entered, release = asyncio.Event(), asyncio.Event()
    real_list = event_repo.list_by_user

    async def gated_list(user_id):
        snapshot = await real_list(user_id)
        entered.set()
        await release.wait()
        return snapshot

    event_repo.list_by_user = gated_list
    reader = asyncio.create_task(web_api.list_event(1))
    await entered.wait()
    second = await web_api.add_event(_event(title="second", start=T0 + timedelta(hours=1)))
    release.set()

    assert [e.id for e in await reader] == [first]
    assert events_key(1) not in fake_cache.data

    event_repo.list_by_user = real_list
    assert [e.id for e in await web_api.list_event(1)] == [first, second]


async def test_invalidation_overtaking_the_cache_write_is_honoured(web_api, fake_cache):
    first = await web_api.add_event(_event(title="first"))
    entered, release = asyncio.Event(), asyncio.Event()
    real_set = fake_cache.set

    async def delayed_set(key, value, ttl=None):
        entered.set()
        await release.wait()
        return await real_set(key, value, ttl)

    fake_cache.set = delayed_set
    reader = asyncio.create_task(web_api.list_event(1))
    await entered.wait()
    # The DEL lands before the SET it was meant to clear
    await web_api.delete_event(first, 1)
    release.set()
    await reader

    assert events_key(1) not in fake_cache.data
    fake_cache.set = real_set
    assert await web_api.list_event(1) == []
