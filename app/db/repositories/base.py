"""
File: app/db/repositories/base.py
Description: 通用异步 Repository 基类

所有领域的 Repository 继承此类，以减少样板代码。

特性：
- 泛型支持: BaseRepository[ModelType]
- 纯异步: 基于 sqlalchemy.ext.asyncio
- 写操作只 flush 不 commit，事务边界由 Service 层控制
- update 操作自动过滤核心系统字段 (id, created_at, updated_at)

Author: jinmozhe
Created: 2025-11-25
Updated: 2026-03-02 (Drop schema type params)
"""

from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    通用 CRUD 仓储基类。
    """

    # 受保护的字段，禁止通过通用 update 方法修改
    PROTECTED_FIELDS: ClassVar[set[str]] = {"id", "created_at", "updated_at"}

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> ModelType | None:
        """根据主键 ID 查询单条记录"""
        return await self.session.get(self.model, id)

    async def create(self, data: dict[str, Any]) -> ModelType:
        """
        创建新记录。flush 以获取数据库默认值，不 commit。
        """
        db_obj = self.model(**data)

        self.session.add(db_obj)
        await self.session.flush()

        return db_obj

    async def update(self, db_obj: ModelType, data: dict[str, Any]) -> ModelType:
        """
        更新现有记录。过滤 PROTECTED_FIELDS 中的字段，不 commit。
        """
        safe_data = {k: v for k, v in data.items() if k not in self.PROTECTED_FIELDS}
        db_obj.update(**safe_data)  # type: ignore[attr-defined]

        self.session.add(db_obj)
        await self.session.flush()

        return db_obj
