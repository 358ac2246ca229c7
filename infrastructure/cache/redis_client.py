"""
Redis客户端 - 会话存储与服务状态探测所需的最小能力集
"""
from __future__ import annotations

import asyncio
import json
import socket
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from core.config import RedisSettings
from core.exceptions import CacheConnectionError
from core.logging_config import get_logger


logger = get_logger(__name__)


# ============= 缓存接口 =============

class CacheInterface(ABC):
    """缓存抽象接口"""

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """获取缓存值"""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """设置缓存值"""
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """删除一个或多个键，返回删除的数量"""
        pass

    @abstractmethod
    async def exists(self, *keys: str) -> int:
        """判断一个或多个键是否存在，返回存在的数量"""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """PING 探测"""
        pass

    async def close(self) -> None:
        """释放连接"""
        return None


class RedisClient(CacheInterface):
    """
    Redis客户端

    特性:
    - 命名空间隔离
    - 自动序列化/反序列化
    - 读操作的 RedisError 记录日志并返回默认值
    """

    def __init__(
        self,
        client: aioredis.Redis,
        namespace: str = "",
        serializer: Optional[Callable] = None,
        deserializer: Optional[Callable] = None,
    ):
        self._client = client
        self._namespace = namespace.strip(":")
        self._serializer = serializer or self._default_serializer
        self._deserializer = deserializer or self._default_deserializer

    def _format_key(self, key: str) -> str:
        """格式化键名，添加命名空间前缀"""
        if not self._namespace:
            return key
        return f"{self._namespace}:{key}"

    def _default_serializer(self, value: Any) -> str:
        if isinstance(value, (str, int, float)):
            return str(value)
        return json.dumps(value, default=str, ensure_ascii=False)

    def _default_deserializer(self, value: Optional[str]) -> Any:
        if value is None:
            return None
        try:
            return json.loads(value)
        except (TypeError, ValueError):
            return value

    async def get(self, key: str, default: Any = None) -> Any:
        formatted_key = self._format_key(key)
        try:
            value = await self._client.get(formatted_key)
        except RedisError as e:
            logger.error("cache_get_failed", key=formatted_key, err=str(e))
            return default
        return self._deserializer(value) if value is not None else default

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        formatted_key = self._format_key(key)
        try:
            result = await self._client.set(
                formatted_key,
                self._serializer(value),
                ex=ttl if ttl and ttl > 0 else None,
            )
            return bool(result)
        except RedisError as e:
            logger.error("cache_set_failed", key=formatted_key, err=str(e))
            return False

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self._client.delete(*[self._format_key(k) for k in keys])
        except RedisError as e:
            logger.error("cache_delete_failed", err=str(e))
            return 0

    async def exists(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self._client.exists(*[self._format_key(k) for k in keys])
        except RedisError as e:
            logger.error("cache_exists_failed", err=str(e))
            return 0

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError) as e:
            logger.warning("cache_ping_failed", err=str(e))
            return False

    async def close(self) -> None:
        await self._client.aclose()


def _keepalive_options() -> dict:
    # 构建跨平台 keepalive 选项（若可用）
    if hasattr(socket, "TCP_KEEPIDLE") and hasattr(socket, "TCP_KEEPINTVL") and hasattr(socket, "TCP_KEEPCNT"):
        return {
            socket.TCP_KEEPIDLE: 1,
            socket.TCP_KEEPINTVL: 1,
            socket.TCP_KEEPCNT: 3,
        }
    return {}


async def connect_redis(cfg: RedisSettings, *, timeout: float = 5.0) -> RedisClient:
    """创建 Redis 客户端并在 timeout 秒内完成 PING，否则抛出 CacheConnectionError"""
    try:
        client = aioredis.from_url(
            cfg.url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=cfg.max_connections,
            socket_connect_timeout=timeout,
            socket_keepalive=True,
            socket_keepalive_options=_keepalive_options(),
        )
    except ValueError as exc:
        raise CacheConnectionError("invalid redis url", cause=exc) from exc

    try:
        await asyncio.wait_for(client.ping(), timeout)
    except asyncio.TimeoutError as exc:
        await client.aclose()
        raise CacheConnectionError(f"redis connect timed out after {timeout}s", cause=exc) from exc
    except (RedisError, OSError) as exc:
        await client.aclose()
        raise CacheConnectionError("failed to connect redis", cause=exc) from exc

    logger.info("redis_connected", namespace=cfg.namespace)
    return RedisClient(client=client, namespace=cfg.namespace)


__all__ = [
    "CacheInterface",
    "RedisClient",
    "connect_redis",
]
