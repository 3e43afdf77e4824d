"""
File: app/domains/profile_fields/repository.py
Description: 自定义资料字段值仓储层 (Repository)

扩展功能：
1. get_values: 读取某个归属实体的全部字段值 (slug -> value)
2. get_by_slug: 读取单个字段值记录
3. upsert: 按 (parent_type, parent_id, slug) 插入或更新

注意：仅 flush 不 commit，事务由 Service 层控制。

Author: jinmozhe
Created: 2026-03-02
"""

import uuid

from sqlalchemy import select

from app.db.models.profile_field import ProfileFieldValue
from app.db.repositories.base import BaseRepository


class ProfileFieldRepository(BaseRepository[ProfileFieldValue]):
    """
    字段值仓储类。
    """

    async def get_values(
        self, parent_type: str, parent_id: uuid.UUID
    ) -> dict[str, str | None]:
        """
        查询归属实体已保存的所有字段值。
        """
        stmt = select(ProfileFieldValue.slug, ProfileFieldValue.value).where(
            ProfileFieldValue.parent_type == parent_type,
            ProfileFieldValue.parent_id == parent_id,
        )
        result = await self.session.execute(stmt)
        return {slug: value for slug, value in result.all()}

    async def get_by_slug(
        self, parent_type: str, parent_id: uuid.UUID, slug: str
    ) -> ProfileFieldValue | None:
        stmt = select(ProfileFieldValue).where(
            ProfileFieldValue.parent_type == parent_type,
            ProfileFieldValue.parent_id == parent_id,
            ProfileFieldValue.slug == slug,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(
        self, parent_type: str, parent_id: uuid.UUID, slug: str, value: str | None
    ) -> ProfileFieldValue:
        """
        存在则更新 value，不存在则创建。
        唯一约束 (parent_type, parent_id, slug) 保证并发写入不会产生重复行。
        """
        db_obj = await self.get_by_slug(parent_type, parent_id, slug)

        if db_obj is None:
            return await self.create(
                {
                    "parent_type": parent_type,
                    "parent_id": parent_id,
                    "slug": slug,
                    "value": value,
                }
            )

        return await self.update(db_obj, {"value": value})
