from __future__ import annotations

import grpc

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
from application.endpoints.web_api import WebApiEndpoints
from grpc_app.stubs.web_api import WebApiServicer


class WebApiGrpcService(WebApiServicer):
    def __init__(self, endpoints: WebApiEndpoints) -> None:
        self._eps = endpoints

    async def AddEvent(self, request: EventDTO, context: grpc.aio.ServicerContext) -> EventIdReply:  # type: ignore[override]
        return await self._eps.add_event(request)

    async def ListEvent(self, request: ListEventRequest, context: grpc.aio.ServicerContext) -> ListEventReply:  # type: ignore[override]
        return await self._eps.list_event(request)

    async def DeleteEvent(self, request: DeleteEventRequest, context: grpc.aio.ServicerContext) -> Empty:  # type: ignore[override]
        return await self._eps.delete_event(request)

    # Session operations, forwarded to the account service
    async def SignUp(self, request: CredentialsDTO, context: grpc.aio.ServicerContext) -> SessionReply:  # type: ignore[override]
        return await self._eps.sign_up(request)

    async def Login(self, request: CredentialsDTO, context: grpc.aio.ServicerContext) -> SessionReply:  # type: ignore[override]
        return await self._eps.login(request)

    async def Logout(self, request: TokenRequest, context: grpc.aio.ServicerContext) -> Empty:  # type: ignore[override]
        return await self._eps.logout(request)
