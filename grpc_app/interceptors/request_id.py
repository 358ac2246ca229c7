"""Request-id propagation: incoming metadata -> contextvar -> structlog context -> trailers."""
from __future__ import annotations

import uuid
import contextvars
import inspect
from typing import Callable, Awaitable, Optional

import grpc
from structlog.contextvars import bind_contextvars, unbind_contextvars


REQUEST_ID_META_KEY = "x-request-id"
_request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("grpc_request_id", default=None)


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def _incoming_request_id(handler_call_details: grpc.HandlerCallDetails) -> str:
    for key, value in handler_call_details.invocation_metadata or ():
        if key == REQUEST_ID_META_KEY and value:
            return value
    return uuid.uuid4().hex


class RequestIdInterceptor(grpc.aio.ServerInterceptor):
    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        if handler is None or not inspect.iscoroutinefunction(handler.unary_unary):
            return handler

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            request_id = _incoming_request_id(handler_call_details)
            # Echo back so the caller can correlate; later interceptors may add more trailers
            context.set_trailing_metadata(((REQUEST_ID_META_KEY, request_id),))
            token = _request_id_var.set(request_id)
            bind_contextvars(request_id=request_id)
            try:
                return await handler.unary_unary(request, context)
            finally:
                unbind_contextvars("request_id")
                _request_id_var.reset(token)

        return grpc.unary_unary_rpc_method_handler(
            _unary_unary,
            request_deserializer=handler.request_deserializer,
            response_serializer=handler.response_serializer,
        )
