"""
数据库连接工厂

进程启动时创建一次 Database（引擎 + 会话工厂），所有请求共享；
建连探测有超时上限，失败即抛出 DatabaseConnectionError。
"""
from __future__ import annotations

import asyncio

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.config import DatabaseSettings
from core.exceptions import DatabaseConnectionError
from core.logging_config import get_logger
from infrastructure.models import Base


logger = get_logger(__name__)


def _build_async_url(database_url: str) -> str:
    """确保数据库URL使用异步驱动"""
    url = make_url(database_url)
    drivername = url.drivername

    if "+" in drivername:
        return database_url

    driver_map = {
        "postgresql": "postgresql+asyncpg",
        "postgres": "postgresql+asyncpg",
        "mysql": "mysql+aiomysql",
        "sqlite": "sqlite+aiosqlite",
    }

    if drivername not in driver_map:
        raise ValueError(f"unsupported database driver: {drivername}")

    return url.set(drivername=driver_map[drivername]).render_as_string(hide_password=False)


class Database:
    """数据库句柄：进程内唯一，跨请求共享"""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.warning("database_ping_failed", err=str(exc))
            return False

    async def create_tables(self) -> None:
        """根据 models 中定义的所有模型建表（仅开发/测试环境）"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


def create_engine_from_config(cfg: DatabaseSettings) -> AsyncEngine:
    url = _build_async_url(cfg.url)
    kwargs = {"echo": cfg.echo, "pool_pre_ping": cfg.pool_pre_ping}
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
        # 内存库必须复用同一连接
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_async_engine(url, **kwargs)


async def new_connection(cfg: DatabaseSettings, *, timeout: float = 5.0) -> Database:
    """创建数据库句柄并在 timeout 秒内完成一次 SELECT 1 探测"""
    try:
        engine = create_engine_from_config(cfg)
    except Exception as exc:
        raise DatabaseConnectionError("invalid database url", cause=exc) from exc

    db = Database(engine)

    async def _probe() -> None:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        if cfg.create_tables:
            await db.create_tables()

    try:
        await asyncio.wait_for(_probe(), timeout)
    except asyncio.TimeoutError as exc:
        await engine.dispose()
        raise DatabaseConnectionError(f"database connect timed out after {timeout}s", cause=exc) from exc
    except Exception as exc:
        await engine.dispose()
        raise DatabaseConnectionError("failed to connect database", cause=exc) from exc

    logger.info("database_connected", backend=engine.url.get_backend_name(), database=engine.url.database)
    return db
