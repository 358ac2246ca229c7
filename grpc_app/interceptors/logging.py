from __future__ import annotations

import inspect
import time
from typing import Callable, Awaitable

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors.exceptions import is_mapped_error


logger = get_logger(__name__)


class LoggingInterceptor(grpc.aio.ServerInterceptor):
    """One line per RPC start and finish; unexpected errors are logged with stack."""

    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        if handler is None or not inspect.iscoroutinefunction(handler.unary_unary):
            return handler

        method = handler_call_details.method

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            start = time.perf_counter()
            ok = False
            logger.debug("grpc_request", method=method, peer=context.peer())
            try:
                resp = await handler.unary_unary(request, context)
                ok = True
                return resp
            except Exception as exc:
                # Aborts carry a status already; mapped business errors were logged by the mapper
                if not (is_mapped_error() or isinstance(exc, grpc.RpcError) or type(exc).__name__ == "AbortError"):
                    logger.error("grpc_unhandled_error", method=method, err=str(exc), exc_info=True)
                raise
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                logger.info("grpc_request_done", method=method, ok=ok, elapsed_ms=round(elapsed_ms, 2))

        return grpc.unary_unary_rpc_method_handler(
            _unary_unary,
            request_deserializer=handler.request_deserializer,
            response_serializer=handler.response_serializer,
        )
