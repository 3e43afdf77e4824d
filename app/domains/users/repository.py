"""
File: app/domains/users/repository.py
Description: 用户领域仓储层 (Repository)

本服务对 users 表只读，扩展功能：
1. get_active: 根据 ID 查询有效用户 (过滤软删除)

Author: jinmozhe
Created: 2025-11-25
Updated: 2026-03-02 (Read-only access)
"""

import uuid

from sqlalchemy import select

from app.db.models.user import User
from app.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """
    用户仓储类。
    查询方法默认过滤软删除的数据 (is_deleted=True)。
    """

    async def get_active(self, user_id: uuid.UUID) -> User | None:
        stmt = select(User).where(User.id == user_id, User.is_deleted.is_(False))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
