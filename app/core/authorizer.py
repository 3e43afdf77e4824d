"""
File: app/core/authorizer.py
Description: 权限判定器 (Authorizer)

字段级权限过滤只依赖 Authorizer 协议，不绑定具体的授权后端：
    await authorizer.check_access(user, "view_user_field", {"user": target})

默认实现 SuperuserAuthorizer：
1. 未激活 / 已软删除的账号一律拒绝
2. 超级管理员通过所有检查
3. 普通用户仅通过 settings.DEFAULT_USER_PERMISSIONS 中列出的权限

Author: jinmozhe
Created: 2026-03-02
"""

from collections.abc import Iterable
from typing import Any, Protocol

from app.core.config import settings
from app.core.logging import logger
from app.db.models.user import User


class Authorizer(Protocol):
    async def check_access(
        self, user: User, permission: str, context: dict[str, Any] | None = None
    ) -> bool: ...


class SuperuserAuthorizer:
    """基于超级管理员标记 + 默认权限列表的简单授权器"""

    def __init__(self, granted: Iterable[str] = ()):
        self.granted = frozenset(granted)

    async def check_access(
        self, user: User, permission: str, context: dict[str, Any] | None = None
    ) -> bool:
        if not user.is_active or user.is_deleted:
            return False

        allowed = user.is_superuser or permission in self.granted

        target = (context or {}).get("user")
        logger.bind(
            user_id=str(user.id),
            permission=permission,
            target_id=str(target.id) if target is not None else None,
            allowed=allowed,
        ).debug("Access checked")

        return allowed


def get_authorizer() -> Authorizer:
    """依赖注入: 默认授权器"""
    return SuperuserAuthorizer(settings.DEFAULT_USER_PERMISSIONS)
