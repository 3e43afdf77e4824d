"""
File: app/db/models/__init__.py
Description: ORM 模型注册表

导入所有模型供 Alembic (env.py) 自动发现 metadata。
每当新增一个 Model 文件，必须在此处导入，否则 autogenerate 无法检测到新表。

Author: jinmozhe
Created: 2025-11-25
"""

from app.db.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDBase,
    UUIDModel,
)
from app.db.models.profile_field import ProfileFieldValue
from app.db.models.user import User

__all__ = [
    # 基类
    "Base",
    "UUIDBase",
    "UUIDModel",
    "TimestampMixin",
    "SoftDeleteMixin",
    # 业务模型
    "User",
    "ProfileFieldValue",
]
