"""
File: app/core/cache.py
Description: 永久缓存抽象 (Read-through, 显式失效)

本模块负责：
1. 定义 SchemaCache 协议: remember_forever(key, producer) / forget(key)
2. RedisCache: 基于 redis-py asyncio，值使用 orjson 序列化，多进程共享
3. MemoryCache: 进程内字典，用于本地调试与测试
4. get_schema_cache: 依据 settings.CACHE_BACKEND 提供单例缓存 (依赖注入)

注意：
- 写入不设置 TTL，缓存仅在调用 forget() 时失效。
- 并发首次访问可能导致重复计算，但 producer 结果是确定的，重复写入无副作用。

Author: jinmozhe
Created: 2026-03-02
"""

from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any, Protocol

import orjson
from redis.asyncio import Redis

from app.core.config import settings
from app.core.logging import logger

Producer = Callable[[], Awaitable[Any]]


class SchemaCache(Protocol):
    """缓存协议：所有后端必须实现以下两个方法"""

    async def remember_forever(self, key: str, producer: Producer) -> Any: ...

    async def forget(self, key: str) -> None: ...


class RedisCache:
    """
    Redis 缓存后端。
    值必须可被 orjson 序列化 (dict / list / str / 数字 / None)。
    """

    def __init__(self, redis: Redis, prefix: str = ""):
        self.redis = redis
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def remember_forever(self, key: str, producer: Producer) -> Any:
        cached = await self.redis.get(self._key(key))
        if cached is not None:
            return orjson.loads(cached)

        value = await producer()
        await self.redis.set(self._key(key), orjson.dumps(value).decode("utf-8"))
        logger.bind(cache_key=key).debug("Cache populated")
        return value

    async def forget(self, key: str) -> None:
        await self.redis.delete(self._key(key))
        logger.bind(cache_key=key).info("Cache key invalidated")


class MemoryCache:
    """
    进程内缓存后端。
    与 RedisCache 行为一致：存入的是序列化后的副本，调用方修改返回值不会污染缓存。
    """

    def __init__(self) -> None:
        self._store: dict[str, bytes] = {}

    async def remember_forever(self, key: str, producer: Producer) -> Any:
        if key in self._store:
            return orjson.loads(self._store[key])

        value = await producer()
        self._store[key] = orjson.dumps(value)
        return value

    async def forget(self, key: str) -> None:
        self._store.pop(key, None)


@lru_cache
def get_schema_cache() -> SchemaCache:
    """
    获取全局缓存实例 (进程级单例)。
    Redis 客户端在此处才被导入，memory 后端无需 Redis 连接。
    """
    if settings.CACHE_BACKEND == "memory":
        return MemoryCache()

    from app.core.redis import redis_client

    return RedisCache(redis_client, prefix=settings.CACHE_PREFIX)
