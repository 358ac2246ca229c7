"""
gRPC 传输层服务器

GrpcTransport 持有唯一的监听 socket，生命周期::

    CREATED --bind()--> LISTENING --serve()--> SERVING --close()--> CLOSED

serve() 在服务器终止前一直阻塞；close() 幂等，先把健康状态切到
NOT_SERVING，再按宽限期停止服务器。serve()/close() 通过 actor() 直接交给
core.group.Group 使用。
"""
from __future__ import annotations

import enum
from typing import Callable, List, Optional, Sequence, Tuple

import grpc
from grpc_health.v1 import health, health_pb2_grpc, health_pb2

from application.endpoints.account import AccountEndpoints
from application.endpoints.web_api import WebApiEndpoints
from core.config import AccountServiceSettings, GrpcTlsSettings, ServiceSettings, WebApiServiceSettings
from core.exceptions import ListenerBindError
from core.logging_config import get_logger
from grpc_app.interceptors.request_id import RequestIdInterceptor
from grpc_app.interceptors.logging import LoggingInterceptor
from grpc_app.interceptors.exceptions import ExceptionMappingInterceptor
from grpc_app.services.account_service import AccountGrpcService
from grpc_app.services.web_api_service import WebApiGrpcService
from grpc_app.stubs import account as account_stub
from grpc_app.stubs import web_api as web_api_stub


logger = get_logger(__name__)

Register = Callable[[grpc.aio.Server], None]


class TransportState(str, enum.Enum):
    CREATED = "CREATED"
    LISTENING = "LISTENING"
    SERVING = "SERVING"
    CLOSED = "CLOSED"


class TransportClosed(Exception):
    """服务器在未请求 close() 的情况下终止"""

    def __init__(self, addr: str) -> None:
        self.addr = addr
        super().__init__(f"gRPC server at {addr} terminated unexpectedly")


def _read(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def server_credentials(tls: GrpcTlsSettings) -> grpc.ServerCredentials:
    if not (tls.cert and tls.key):
        raise ListenerBindError("GRPC TLS enabled but cert/key not provided")
    root_certificates = _read(tls.ca) if tls.ca else None
    return grpc.ssl_server_credentials(
        [(_read(tls.key), _read(tls.cert))],
        root_certificates=root_certificates,
        require_client_auth=bool(root_certificates),
    )


class GrpcTransport:
    def __init__(
        self,
        register: Register,
        service_name: str,
        *,
        host: str = "0.0.0.0",
        port: int = 0,
        interceptors: Sequence[grpc.aio.ServerInterceptor] = (),
        options: Optional[List[Tuple[str, object]]] = None,
        grace: Optional[float] = 5.0,
        tls: Optional[GrpcTlsSettings] = None,
    ) -> None:
        self._register = register
        self._service_name = service_name
        self._host = host
        self._port = port
        self._interceptors = tuple(interceptors)
        self._options = list(options or [])
        # 一个进程只持有一个监听者：端口被占用时必须绑定失败
        if not any(name == "grpc.so_reuseport" for name, _ in self._options):
            self._options.append(("grpc.so_reuseport", 0))
        self._grace = grace
        self._tls = tls
        self._server: Optional[grpc.aio.Server] = None
        self._health = health.HealthServicer()
        self._state = TransportState.CREATED
        self._close_requested = False

    @property
    def state(self) -> TransportState:
        return self._state

    @property
    def port(self) -> int:
        """实际绑定的端口（配置为 0 时由系统分配）"""
        return self._port

    @property
    def address(self) -> str:
        return f"{self._host}:{self._port}"

    @property
    def service_name(self) -> str:
        return self._service_name

    @property
    def health(self) -> health.HealthServicer:
        return self._health

    def bind(self) -> None:
        if self._state is not TransportState.CREATED:
            raise RuntimeError(f"cannot bind transport in state {self._state.value}")
        address = self.address
        server = grpc.aio.server(interceptors=self._interceptors, options=self._options)
        try:
            if self._tls is not None and self._tls.enabled:
                bound = server.add_secure_port(address, server_credentials(self._tls))
            else:
                bound = server.add_insecure_port(address)
        except ListenerBindError:
            raise
        except (RuntimeError, OSError) as exc:
            raise ListenerBindError(f"cannot listen on {address}", cause=exc) from exc
        # 旧版本 grpcio 绑定失败时返回 0 而不是抛异常
        if not bound:
            raise ListenerBindError(f"cannot listen on {address}")
        self._server = server
        self._port = bound
        self._state = TransportState.LISTENING
        logger.info("transport_listening", transport="gRPC", addr=self.address)

    async def serve(self) -> None:
        if self._state is TransportState.CLOSED:
            return None
        if self._state is not TransportState.LISTENING:
            raise RuntimeError(f"cannot serve transport in state {self._state.value}")
        assert self._server is not None

        self._register(self._server)
        health_pb2_grpc.add_HealthServicer_to_server(self._health, self._server)
        await self._server.start()
        if self._close_requested:
            # close() 在启动期间到达
            await self._server.stop(self._grace)
            return None

        self._state = TransportState.SERVING
        self._health.set("", health_pb2.HealthCheckResponse.SERVING)
        self._health.set(self._service_name, health_pb2.HealthCheckResponse.SERVING)
        logger.info("transport_serving", transport="gRPC", addr=self.address, service=self._service_name)

        await self._server.wait_for_termination()
        if not self._close_requested:
            self._state = TransportState.CLOSED
            raise TransportClosed(self.address)
        return None

    async def close(self, _err: Optional[BaseException] = None) -> None:
        if self._close_requested:
            return
        self._close_requested = True
        previous = self._state
        self._state = TransportState.CLOSED
        # 先摘流量，再停机
        self._health.enter_graceful_shutdown()
        if self._server is not None:
            await self._server.stop(self._grace)
        logger.info("transport_closed", transport="gRPC", addr=self.address, previous=previous.value)

    def actor(self):
        """返回可直接交给 Group.add 的 (execute, interrupt)"""
        return self.serve, self.close


def default_interceptors() -> Tuple[grpc.aio.ServerInterceptor, ...]:
    return (
        RequestIdInterceptor(),
        LoggingInterceptor(),
        ExceptionMappingInterceptor(),  # maps business exceptions
    )


def _options(cfg: ServiceSettings) -> List[Tuple[str, object]]:
    return [
        ("grpc.max_concurrent_streams", max(1, cfg.max_concurrent_streams)),
    ]


def create_account_transport(cfg: AccountServiceSettings, endpoints: AccountEndpoints) -> GrpcTransport:
    servicer = AccountGrpcService(endpoints)
    return GrpcTransport(
        lambda server: account_stub.add_AccountServicer_to_server(servicer, server),
        account_stub.SERVICE_NAME,
        host=cfg.grpc_host,
        port=cfg.grpc_port,
        interceptors=default_interceptors(),
        options=_options(cfg),
        grace=cfg.shutdown_grace,
        tls=cfg.tls,
    )


def create_web_api_transport(cfg: WebApiServiceSettings, endpoints: WebApiEndpoints) -> GrpcTransport:
    servicer = WebApiGrpcService(endpoints)
    return GrpcTransport(
        lambda server: web_api_stub.add_WebApiServicer_to_server(servicer, server),
        web_api_stub.SERVICE_NAME,
        host=cfg.grpc_host,
        port=cfg.grpc_port,
        interceptors=default_interceptors(),
        options=_options(cfg),
        grace=cfg.shutdown_grace,
        tls=cfg.tls,
    )


__all__ = [
    "GrpcTransport",
    "TransportState",
    "TransportClosed",
    "create_account_transport",
    "create_web_api_transport",
]
