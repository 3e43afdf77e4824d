"""
File: app/core/security.py
Description: 安全工具模块 (JWT)

本服务不负责登录与密码管理，仅校验账号服务签发的 Access Token。
本模块负责：
1. JWT 签发: create_access_token (供运维脚本与测试使用)
2. JWT 解析: decode_access_token (供 deps.get_current_user 使用)

Author: jinmozhe
Created: 2025-12-05
Updated: 2026-03-02 (Drop password hashing)
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import jwt

from app.core.config import settings


def _secret_key() -> str:
    secret_key = settings.SECRET_KEY
    if secret_key is None:
        raise ValueError("SECRET_KEY configuration is missing.")
    return secret_key


def create_access_token(
    subject: str | Any, expires_delta: timedelta | None = None
) -> str:
    """
    生成 JWT Access Token (短效, 无状态)。

    Args:
        subject: 主体标识 (user_id)
        expires_delta: 自定义过期时间差 (默认 ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        str: 编码后的 JWT 字符串
    """
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    to_encode = {"exp": expire, "sub": str(subject), "type": "access"}
    return jwt.encode(to_encode, _secret_key(), algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    校验签名与有效期并返回 Payload。
    失败时抛出 jose.JWTError，由调用方转换为 401。
    """
    return jwt.decode(token, _secret_key(), algorithms=[settings.ALGORITHM])
