"""
File: app/db/models/profile_field.py
Description: 自定义资料字段值模型

每条记录保存某个归属实体 (parent_type + parent_id) 的一个字段值 (slug -> value)。
字段定义本身来自 JSON Schema 文件，不入库。

注意：
- 采用 "No-Relationship" 模式，不定义 ORM relationship，也不设外键，
  便于将来复用到用户以外的实体 (例如 groups)。
- 记录仅在首次写入字段时创建，之后原地更新，不提供删除路径。

Author: jinmozhe
Created: 2026-03-02
"""

import uuid

from sqlalchemy import String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from app.db.models.base import UUIDModel


class ProfileFieldValue(UUIDModel):
    """
    自定义资料字段值表 (N:1 归属实体)
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "profile_fields"

    __table_args__ = (
        UniqueConstraint(
            "parent_type", "parent_id", "slug", name="uq_profile_fields_parent_slug"
        ),
    )

    parent_type: Mapped[str] = mapped_column(
        String(50), nullable=False, index=True, comment="归属实体类型 (如 users)"
    )

    parent_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), nullable=False, index=True, comment="归属实体ID"
    )

    slug: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="字段 Key"
    )

    value: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="字段值 (文本存储)"
    )
