"""gRPC client stub, servicer base and registration for account.v1.Account."""
from __future__ import annotations

import grpc

from application.dto import (
    CredentialsDTO,
    Empty,
    ServiceStatusReply,
    SessionReply,
    TokenReply,
    TokenRequest,
)
from grpc_app.codec import deserializer, serializer


SERVICE_NAME = "account.v1.Account"

# method name -> (request model, response model)
METHODS = {
    "IsAuth": (TokenRequest, TokenReply),
    "SignUp": (CredentialsDTO, SessionReply),
    "Login": (CredentialsDTO, SessionReply),
    "Logout": (TokenRequest, Empty),
    "ServiceStatus": (Empty, ServiceStatusReply),
}


def full_method(name: str) -> str:
    return f"/{SERVICE_NAME}/{name}"


class AccountStub(object):
    """Client stub for account.v1.Account."""

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


class AccountServicer(object):
    """Server-side implementation base class."""

    async def IsAuth(self, request: TokenRequest, context: grpc.aio.ServicerContext) -> TokenReply:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")

    async def SignUp(self, request: CredentialsDTO, context: grpc.aio.ServicerContext) -> SessionReply:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")

    async def Login(self, request: CredentialsDTO, context: grpc.aio.ServicerContext) -> SessionReply:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")

    async def Logout(self, request: TokenRequest, context: grpc.aio.ServicerContext) -> Empty:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")

    async def ServiceStatus(self, request: Empty, context: grpc.aio.ServicerContext) -> ServiceStatusReply:
        await context.abort(grpc.StatusCode.UNIMPLEMENTED, "Method not implemented!")


def add_AccountServicer_to_server(servicer: AccountServicer, server: grpc.aio.Server) -> None:
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
    "AccountStub",
    "AccountServicer",
    "add_AccountServicer_to_server",
]
