"""
account 服务进程入口

配置 -> 数据库 -> 缓存 -> 仓储 -> 服务 -> 端点 -> gRPC 传输 -> 监督组。
任一启动步骤失败都记录日志并以退出码 1 结束，且发生在监听端口之前。
"""
import asyncio
import sys
from typing import Awaitable, Callable, Optional

from application.endpoints.account import make_account_endpoints
from application.services.account_service import AccountApplicationService
from application.services.token_service import TokenService
from core.config import AccountServiceSettings, get_config_by_key
from core.exceptions import ListenerBindError, StartupError
from core.logging_config import get_logger
from core.signals import SignalWatcher
from grpc_app.runner import exit_code, run_until_stopped
from grpc_app.server import create_account_transport
from infrastructure.cache.redis_client import CacheInterface, connect_redis
from infrastructure.database import Database, new_connection
from infrastructure.repositories.account_repository import SQLAlchemyAccountRepository


logger = get_logger(__name__)

SERVICE_KEY = "account_service"

CacheConnector = Callable[..., Awaitable[CacheInterface]]


async def run(
    config: Optional[AccountServiceSettings] = None,
    *,
    cache_connector: CacheConnector = connect_redis,
    watcher: Optional[SignalWatcher] = None,
) -> int:
    db: Optional[Database] = None
    cache: Optional[CacheInterface] = None
    try:
        cfg = config or get_config_by_key(SERVICE_KEY)
        db = await new_connection(cfg.database, timeout=cfg.connect_timeout)
        cache = await cache_connector(cfg.redis, timeout=cfg.connect_timeout)

        repository = SQLAlchemyAccountRepository(db)
        tokens = TokenService(cfg.secret_key, algorithm=cfg.algorithm, ttl_seconds=cfg.token_ttl_seconds)
        service = AccountApplicationService(repository, cache, tokens)
        endpoints = make_account_endpoints(service)

        transport = create_account_transport(cfg, endpoints)
        transport.bind()
    except ListenerBindError as exc:
        logger.error("startup_failed", transport="gRPC", addr=cfg.grpc_address, during=exc.during, err=str(exc))
        await _release(db, cache)
        return exc.exit_code
    except StartupError as exc:
        logger.error("startup_failed", service=SERVICE_KEY, during=exc.during, err=str(exc))
        await _release(db, cache)
        return exc.exit_code

    # 处理器在连接释放完毕后才恢复，清理期间的第二个信号只会被记录
    watcher = watcher or SignalWatcher()
    try:
        result = await run_until_stopped(transport, watcher, join_timeout=cfg.shutdown_grace + 5)
        await _release(db, cache)
    finally:
        watcher.close()
    return exit_code(result)


async def _release(db: Optional[Database], cache: Optional[CacheInterface]) -> None:
    if cache is not None:
        await cache.close()
    if db is not None:
        await db.dispose()


def main() -> None:
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
