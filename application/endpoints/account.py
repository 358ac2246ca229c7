"""
account 端点集合：每个服务方法一个可调用对象，传输层只依赖端点
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from application.dto import (
    CredentialsDTO,
    Empty,
    ServiceStatusReply,
    SessionReply,
    TokenReply,
    TokenRequest,
)
from domain.account.entity import Credentials, Token
from domain.account.service import AccountService


@dataclass(frozen=True)
class AccountEndpoints:
    is_auth: Callable[[TokenRequest], Awaitable[TokenReply]]
    sign_up: Callable[[CredentialsDTO], Awaitable[SessionReply]]
    login: Callable[[CredentialsDTO], Awaitable[SessionReply]]
    logout: Callable[[TokenRequest], Awaitable[Empty]]
    service_status: Callable[[Empty], Awaitable[ServiceStatusReply]]


def make_account_endpoints(svc: AccountService) -> AccountEndpoints:
    async def is_auth(req: TokenRequest) -> TokenReply:
        token = await svc.is_auth(Token(req.token))
        return TokenReply(token=token.value)

    async def sign_up(req: CredentialsDTO) -> SessionReply:
        user_id, token = await svc.sign_up(Credentials(req.username, req.password))
        return SessionReply(id=user_id, token=token.value)

    async def login(req: CredentialsDTO) -> SessionReply:
        user_id, token = await svc.login(Credentials(req.username, req.password))
        return SessionReply(id=user_id, token=token.value)

    async def logout(req: TokenRequest) -> Empty:
        await svc.logout(Token(req.token))
        return Empty()

    async def service_status(_req: Empty) -> ServiceStatusReply:
        return ServiceStatusReply(code=await svc.service_status())

    return AccountEndpoints(
        is_auth=is_auth,
        sign_up=sign_up,
        login=login,
        logout=logout,
        service_status=service_status,
    )
