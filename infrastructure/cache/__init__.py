"""缓存层对外暴露的接口"""
from .redis_client import (
    CacheInterface,
    RedisClient,
    connect_redis,
)

__all__ = [
    "CacheInterface",
    "RedisClient",
    "connect_redis",
]
