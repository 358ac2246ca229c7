from __future__ import annotations

from typing import Callable, Awaitable
import contextvars
import inspect

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors.request_id import REQUEST_ID_META_KEY, get_request_id
from domain.common.exceptions import BusinessException
from shared.codes import BusinessCode


logger = get_logger(__name__)

# Mark that the current request has been mapped to a gRPC status
_mapped_error: contextvars.ContextVar[bool] = contextvars.ContextVar("grpc_mapped_error", default=False)


def set_mapped_error() -> None:
    _mapped_error.set(True)


def is_mapped_error() -> bool:
    return bool(_mapped_error.get())


_STATUS_BY_CODE = {
    BusinessCode.PARAM_VALIDATION_ERROR: grpc.StatusCode.INVALID_ARGUMENT,

    BusinessCode.EVENT_NOT_FOUND: grpc.StatusCode.NOT_FOUND,
    BusinessCode.USER_ALREADY_EXISTS: grpc.StatusCode.ALREADY_EXISTS,
    BusinessCode.PASSWORD_ERROR: grpc.StatusCode.UNAUTHENTICATED,
    BusinessCode.TOKEN_EXPIRED: grpc.StatusCode.UNAUTHENTICATED,

    BusinessCode.UNAUTHORIZED: grpc.StatusCode.UNAUTHENTICATED,

    BusinessCode.SERVICE_UNAVAILABLE: grpc.StatusCode.UNAVAILABLE,
    BusinessCode.SYSTEM_ERROR: grpc.StatusCode.INTERNAL,
}


def business_code_to_grpc_status(code: int) -> grpc.StatusCode:
    try:
        bc = BusinessCode(code)
    except ValueError:
        return grpc.StatusCode.FAILED_PRECONDITION
    return _STATUS_BY_CODE.get(bc, grpc.StatusCode.FAILED_PRECONDITION)


class ExceptionMappingInterceptor(grpc.aio.ServerInterceptor):
    """Map business exceptions to gRPC status codes plus x-biz-code / x-error-type trailers."""

    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        if handler is None or not inspect.iscoroutinefunction(handler.unary_unary):
            return handler

        method = handler_call_details.method

        async def _abort(context: grpc.aio.ServicerContext, status: grpc.StatusCode, code: int,
                         error_type: str, message: str, public_message: str) -> None:
            trailers = [("x-biz-code", str(int(code))), ("x-error-type", error_type)]
            request_id = get_request_id()
            if request_id:
                trailers.append((REQUEST_ID_META_KEY, request_id))
            context.set_trailing_metadata(tuple(trailers))
            set_mapped_error()
            # Concise business error log (no stack)
            logger.error(
                "grpc_mapped_error",
                method=method,
                code=str(int(code)),
                status=str(status),
                message=message,
            )
            await context.abort(status, public_message)

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            try:
                return await handler.unary_unary(request, context)
            except BusinessException as exc:
                status = business_code_to_grpc_status(exc.code)
                await _abort(context, status, exc.code, exc.error_type or "BusinessError", exc.message, exc.message)
            except Exception as exc:
                if isinstance(exc, grpc.RpcError) or type(exc).__name__ == "AbortError":
                    # context.abort() from the handler itself
                    raise
                await _abort(
                    context,
                    grpc.StatusCode.INTERNAL,
                    BusinessCode.SYSTEM_ERROR,
                    "SystemError",
                    str(exc),
                    "internal error",
                )

        return grpc.unary_unary_rpc_method_handler(
            _unary_unary,
            request_deserializer=handler.request_deserializer,
            response_serializer=handler.response_serializer,
        )
