"""
File: tests/integration/test_health.py
Description: 健康检查接口集成测试

健康检查接口是特例，不使用统一响应信封，返回原始 JSON 便于 K8s/LB 解析。

Author: jinmozhe
Created: 2025-11-26
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """
    测试：GET /health
    验证：返回 {"status": "ok"}，不包含信封字段，但仍带 X-Request-ID
    """
    response = await client.get("/health")

    assert response.status_code == 200

    data = response.json()
    assert data == {"status": "ok"}
    assert "code" not in data
    assert "request_id" not in data

    request_id_header = response.headers.get("X-Request-ID")
    assert request_id_header


@pytest.mark.asyncio
async def test_root(client: AsyncClient) -> None:
    """测试：GET / 返回统一信封"""
    response = await client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == "success"
    assert body["data"]["health_url"] == "/health"


@pytest.mark.asyncio
async def test_unknown_route(client: AsyncClient) -> None:
    """测试：未注册的路由返回 404 失败信封"""
    response = await client.get("/does-not-exist")

    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "system.not_found"
    assert body["request_id"] == response.headers.get("X-Request-ID")
