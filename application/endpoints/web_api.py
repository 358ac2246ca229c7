"""
web-api 端点集合
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from application.dto import (
    CredentialsDTO,
    DeleteEventRequest,
    Empty,
    EventDTO,
    EventIdReply,
    ListEventReply,
    ListEventRequest,
    SessionReply,
    TokenRequest,
)
from domain.account.entity import Credentials, Token
from domain.calendar.entity import Event
from domain.web_api.service import WebApiService


def event_to_dto(event: Event) -> EventDTO:
    return EventDTO.model_validate(event)


def dto_to_event(dto: EventDTO) -> Event:
    return Event(
        id=None,
        user_id=dto.user_id,
        title=dto.title,
        description=dto.description,
        starts_at=dto.starts_at,
        ends_at=dto.ends_at,
    )


@dataclass(frozen=True)
class WebApiEndpoints:
    add_event: Callable[[EventDTO], Awaitable[EventIdReply]]
    list_event: Callable[[ListEventRequest], Awaitable[ListEventReply]]
    delete_event: Callable[[DeleteEventRequest], Awaitable[Empty]]
    sign_up: Callable[[CredentialsDTO], Awaitable[SessionReply]]
    login: Callable[[CredentialsDTO], Awaitable[SessionReply]]
    logout: Callable[[TokenRequest], Awaitable[Empty]]


def make_web_api_endpoints(svc: WebApiService) -> WebApiEndpoints:
    async def add_event(req: EventDTO) -> EventIdReply:
        return EventIdReply(id=await svc.add_event(dto_to_event(req)))

    async def list_event(req: ListEventRequest) -> ListEventReply:
        events = await svc.list_event(req.user_id)
        return ListEventReply(events=[event_to_dto(e) for e in events])

    async def delete_event(req: DeleteEventRequest) -> Empty:
        await svc.delete_event(req.event_id, req.user_id)
        return Empty()

    async def sign_up(req: CredentialsDTO) -> SessionReply:
        user_id, token = await svc.sign_up(Credentials(req.username, req.password))
        return SessionReply(id=user_id, token=token.value)

    async def login(req: CredentialsDTO) -> SessionReply:
        user_id, token = await svc.login(Credentials(req.username, req.password))
        return SessionReply(id=user_id, token=token.value)

    async def logout(req: TokenRequest) -> Empty:
        await svc.logout(Token(req.token))
        return Empty()

    return WebApiEndpoints(
        add_event=add_event,
        list_event=list_event,
        delete_event=delete_event,
        sign_up=sign_up,
        login=login,
        logout=logout,
    )
