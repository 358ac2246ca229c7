"""
web-api 聚合服务进程入口

与 account 服务相同的启动形状；会话操作通过 gRPC 客户端转发给 account 服务。
"""
import asyncio
import sys
from typing import Awaitable, Callable, Optional

from application.endpoints.web_api import make_web_api_endpoints
from application.services.web_api_service import WebApiApplicationService
from core.config import WebApiServiceSettings, get_config_by_key
from core.exceptions import ListenerBindError, StartupError
from core.logging_config import get_logger
from core.signals import SignalWatcher
from domain.account.service import AccountService
from grpc_app.clients.account import AccountGrpcClient
from grpc_app.runner import exit_code, run_until_stopped
from grpc_app.server import create_web_api_transport
from infrastructure.cache.redis_client import CacheInterface, connect_redis
from infrastructure.database import Database, new_connection
from infrastructure.repositories.event_repository import SQLAlchemyEventRepository


logger = get_logger(__name__)

SERVICE_KEY = "web_api_service"

CacheConnector = Callable[..., Awaitable[CacheInterface]]


async def run(
    config: Optional[WebApiServiceSettings] = None,
    *,
    cache_connector: CacheConnector = connect_redis,
    account: Optional[AccountService] = None,
    watcher: Optional[SignalWatcher] = None,
) -> int:
    db: Optional[Database] = None
    cache: Optional[CacheInterface] = None
    client: Optional[AccountGrpcClient] = None
    try:
        cfg = config or get_config_by_key(SERVICE_KEY)
        db = await new_connection(cfg.database, timeout=cfg.connect_timeout)
        cache = await cache_connector(cfg.redis, timeout=cfg.connect_timeout)

        if account is None:
            # 连接是惰性的：account 服务暂不可达时首个调用才会失败
            client = AccountGrpcClient.insecure(cfg.account_target, timeout=cfg.account_timeout)
            account = client

        events = SQLAlchemyEventRepository(db)
        service = WebApiApplicationService(events, account, cache, list_ttl_seconds=cfg.events_cache_ttl)
        endpoints = make_web_api_endpoints(service)

        transport = create_web_api_transport(cfg, endpoints)
        transport.bind()
    except ListenerBindError as exc:
        logger.error("startup_failed", transport="gRPC", addr=cfg.grpc_address, during=exc.during, err=str(exc))
        await _release(db, cache, client)
        return exc.exit_code
    except StartupError as exc:
        logger.error("startup_failed", service=SERVICE_KEY, during=exc.during, err=str(exc))
        await _release(db, cache, client)
        return exc.exit_code

    watcher = watcher or SignalWatcher()
    try:
        result = await run_until_stopped(transport, watcher, join_timeout=cfg.shutdown_grace + 5)
        await _release(db, cache, client)
    finally:
        watcher.close()
    return exit_code(result)


async def _release(
    db: Optional[Database],
    cache: Optional[CacheInterface],
    client: Optional[AccountGrpcClient],
) -> None:
    if client is not None:
        await client.close()
    if cache is not None:
        await cache.close()
    if db is not None:
        await db.dispose()


def main() -> None:
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
