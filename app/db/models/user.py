"""
File: app/db/models/user.py
Description: 用户核心账号模型 (只读映射)

账号由账号服务写入，本服务只读取 users 表用于：
1. JWT 鉴权后的当前用户查询
2. 自定义资料字段的归属 (ProfileFieldValue.parent_id)
3. 权限判定 (is_active / is_superuser)

Author: jinmozhe
Created: 2025-11-25
Updated: 2026-03-02 (Trim to fields used by profile fields)
"""

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from app.db.models.base import SoftDeleteMixin, UUIDModel


class User(UUIDModel, SoftDeleteMixin):
    """
    用户模型 (账号域)
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "users"

    username: Mapped[str | None] = mapped_column(
        String(50), unique=True, nullable=True, comment="用户名"
    )

    email: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True, comment="用户邮箱"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default=text("true"),
        nullable=False,
        comment="是否激活",
    )

    is_superuser: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=text("false"),
        nullable=False,
        comment="是否超级管理员",
    )
