"""gRPC client stub, servicer base and registration for webapi.v1.WebApi."""
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
from grpc_app.codec import deserializer, serializer


SERVICE_NAME = "webapi.v1.WebApi"

METHODS = {
    "AddEvent": (EventDTO, EventIdReply),
    "ListEvent": (ListEventRequest, ListEventReply),
    "DeleteEvent": (DeleteEventRequest, Empty),
    "SignUp": (CredentialsDTO, SessionReply),
    "Login": (CredentialsDTO, SessionReply),
    "Logout": (TokenRequest, Empty),
}


def full_method(name: str) -> str:
    return f"/{SERVICE_NAME}/{name}"


class WebApiStub(object):
    """Client stub for webapi.v1.WebApi."""

    def __init__(self, channel: grpc.aio.Channel) -> None:
        for name, (req, resp) in METHODS.items():
            setattr(
                self,
                name,
                channel.unary_unary(
                    full_method(name),
                    request_serializer=serializer(req),
                    response_deserializer=deserializer(resp),
                ),
            )


class WebApiServicer(object):
    """Server-side implementation base class."""

    async def AddEvent(self, request: EventDTO, context: grpc.aio.ServicerContext) -> EventIdReply:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")

    async def ListEvent(self, request: ListEventRequest, context: grpc.aio.ServicerContext) -> ListEventReply:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")

    async def DeleteEvent(self, request: DeleteEventRequest, context: grpc.aio.ServicerContext) -> Empty:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")

    async def SignUp(self, request: CredentialsDTO, context: grpc.aio.ServicerContext) -> SessionReply:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")

    async def Login(self, request: CredentialsDTO, context: grpc.aio.ServicerContext) -> SessionReply:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")

    async def Logout(self, request: TokenRequest, context: grpc.aio.ServicerContext) -> Empty:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")


def add_WebApiServicer_to_server(servicer: WebApiServicer, server: grpc.aio.Server) -> None:
    rpc_method_handlers = {
        name: grpc.unary_unary_rpc_method_handler(
            getattr(servicer, name),
            request_deserializer=deserializer(req),
            response_serializer=serializer(resp),
        )
        for name, (req, resp) in METHODS.items()
    }
    generic_handler = grpc.method_handlers_generic_handler(SERVICE_NAME, rpc_method_handlers)
    server.add_generic_rpc_handlers((generic_handler,))


__all__ = [
    "SERVICE_NAME",
    "WebApiStub",
    "WebApiServicer",
    "add_WebApiServicer_to_server",
]
