"""gRPC client of the account service, usable wherever an AccountService is expected."""
from __future__ import annotations

from typing import Optional, Tuple

import grpc

from application.dto import CredentialsDTO, Empty, TokenRequest
from core.exceptions import ServiceUnavailableException, TokenExpiredException, UnauthorizedException
from core.logging_config import get_logger
from domain.account.entity import Credentials, Token
from domain.account.service import AccountService
from domain.common.exceptions import BusinessException
from grpc_app.interceptors.request_id import REQUEST_ID_META_KEY, get_request_id
from grpc_app.stubs.account import AccountStub
from shared.codes import BusinessCode


logger = get_logger(__name__)

_UNAVAILABLE = {grpc.StatusCode.UNAVAILABLE, grpc.StatusCode.DEADLINE_EXCEEDED}


def _to_business_exception(exc: grpc.aio.AioRpcError) -> BusinessException:
    """Rebuild the remote business error from trailing metadata (x-biz-code / x-error-type)."""
    md = dict(exc.trailing_metadata() or ())
    raw_code = md.get("x-biz-code")
    if raw_code is None:
        if exc.code() in _UNAVAILABLE:
            return ServiceUnavailableException("account", exc.details())
        return BusinessException(
            code=BusinessCode.SYSTEM_ERROR,
            message=exc.details() or str(exc.code()),
            error_type="RemoteError",
        )
    try:
        code = int(raw_code)
    except ValueError:
        code = BusinessCode.SYSTEM_ERROR
    if code == BusinessCode.TOKEN_EXPIRED:
        return TokenExpiredException()
    if code == BusinessCode.UNAUTHORIZED:
        return UnauthorizedException(exc.details() or "Unauthorized")
    return BusinessException(
        code=code,
        message=exc.details() or "",
        error_type=md.get("x-error-type") or "BusinessError",
    )


class AccountGrpcClient(AccountService):

    def __init__(self, channel: grpc.aio.Channel, *, timeout: Optional[float] = 5.0) -> None:
        self._channel = channel
        self._stub = AccountStub(channel)
        self._timeout = timeout

    @classmethod
    def insecure(cls, target: str, *, timeout: Optional[float] = 5.0) -> "AccountGrpcClient":
        return cls(grpc.aio.insecure_channel(target), timeout=timeout)

    async def close(self) -> None:
        await self._channel.close()

    async def _call(self, method: str, request):
        metadata = None
        request_id = get_request_id()
        if request_id:
            metadata = ((REQUEST_ID_META_KEY, request_id),)
        try:
            return await getattr(self._stub, method)(request, timeout=self._timeout, metadata=metadata)
        except grpc.aio.AioRpcError as exc:
            logger.warning(
                "account_rpc_failed",
                method=method,
                status=str(exc.code()),
                details=exc.details(),
                request_id=request_id,
            )
            raise _to_business_exception(exc) from exc

    async def is_auth(self, token: Token) -> Token:
        reply = await self._call("IsAuth", TokenRequest(token=token.value))
        return Token(reply.token)

    async def sign_up(self, user: Credentials) -> Tuple[int, Token]:
        reply = await self._call("SignUp", CredentialsDTO(username=user.username, password=user.password))
        return reply.id, Token(reply.token)

    async def login(self, user: Credentials) -> Tuple[int, Token]:
        reply = await self._call("Login", CredentialsDTO(username=user.username, password=user.password))
        return reply.id, Token(reply.token)

    async def logout(self, token: Token) -> None:
        await self._call("Logout", TokenRequest(token=token.value))

    async def service_status(self) -> int:
        reply = await self._call("ServiceStatus", Empty())
        return reply.code
