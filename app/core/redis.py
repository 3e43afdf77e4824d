"""
File: app/core/redis.py
Description: Redis 客户端管理 (Async)

本模块负责：
1. 创建全局 Redis 客户端 (redis-py asyncio，内部维护连接池)
2. 管理连接生命周期 (关闭)

注意：
使用 decode_responses=True，确保从 Redis 读取的数据自动解码为 str。
客户端在首次执行命令时才会真正建立连接。

Author: jinmozhe
Created: 2025-12-05
"""

from redis.asyncio import Redis, from_url

from app.core.config import settings

redis_client: Redis = from_url(
    settings.REDIS_URL,
    encoding="utf-8",
    decode_responses=True,
)


async def close_redis() -> None:
    """
    关闭 Redis 连接池。
    应在 FastAPI 应用的 lifespan shutdown 事件中调用。
    """
    await redis_client.aclose()
