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
from application.endpoints.account import AccountEndpoints
from grpc_app.stubs.account import AccountServicer


class AccountGrpcService(AccountServicer):
    """Thin adapter: each RPC forwards the decoded message to its endpoint."""

    def __init__(self, endpoints: AccountEndpoints) -> None:
        self._eps = endpoints

    async def IsAuth(self, request: TokenRequest, context: grpc.aio.ServicerContext) -> TokenReply:  # type: ignore[override]
        return await self._eps.is_auth(request)

    async def SignUp(self, request: CredentialsDTO, context: grpc.aio.ServicerContext) -> SessionReply:  # type: ignore[override]
        return await self._eps.sign_up(request)

    async def Login(self, request: CredentialsDTO, context: grpc.aio.ServicerContext) -> SessionReply:  # type: ignore[override]
        return await self._eps.login(request)

    async def Logout(self, request: TokenRequest, context: grpc.aio.ServicerContext) -> Empty:  # type: ignore[override]
        return await self._eps.logout(request)

    async def ServiceStatus(self, request: Empty, context: grpc.aio.ServicerContext) -> ServiceStatusReply:  # type: ignore[override]
        return await self._eps.service_status(request)
