"""create users and profile_fields

Revision ID: 0001
Revises:
Create Date: 2026-03-02 10:00:00.000000+00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="创建时间 (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="更新时间 (UTC)",
        ),
    ]


def upgrade() -> None:
    # users 通常已由账号服务创建，这里仅在缺失时建表
    bind = op.get_bind()
    if not sa.inspect(bind).has_table("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Uuid(), nullable=False, comment="主键 (UUID v7)"),
            sa.Column("username", sa.String(length=50), nullable=True, comment="用户名"),
            sa.Column("email", sa.String(length=255), nullable=True, comment="用户邮箱"),
            sa.Column(
                "is_active",
                sa.Boolean(),
                server_default=sa.text("true"),
                nullable=False,
                comment="是否激活",
            ),
            sa.Column(
                "is_superuser",
                sa.Boolean(),
                server_default=sa.text("false"),
                nullable=False,
                comment="是否超级管理员",
            ),
            sa.Column(
                "is_deleted",
                sa.Boolean(),
                server_default=sa.text("false"),
                nullable=False,
                comment="是否软删除",
            ),
            sa.Column(
                "deleted_at", sa.DateTime(timezone=True), nullable=True, comment="删除时间 (UTC)"
            ),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
            sa.UniqueConstraint("email", name=op.f("uq_users_email")),
            sa.UniqueConstraint("username", name=op.f("uq_users_username")),
        )

    op.create_table(
        "profile_fields",
        sa.Column("id", sa.Uuid(), nullable=False, comment="主键 (UUID v7)"),
        sa.Column(
            "parent_type", sa.String(length=50), nullable=False, comment="归属实体类型 (如 users)"
        ),
        sa.Column("parent_id", sa.Uuid(), nullable=False, comment="归属实体ID"),
        sa.Column("slug", sa.String(length=100), nullable=False, comment="字段 Key"),
        sa.Column("value", sa.Text(), nullable=True, comment="字段值 (文本存储)"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_profile_fields")),
        sa.UniqueConstraint(
            "parent_type", "parent_id", "slug", name="uq_profile_fields_parent_slug"
        ),
    )
    op.create_index(
        op.f("ix_profile_fields_parent_type"), "profile_fields", ["parent_type"]
    )
    op.create_index(op.f("ix_profile_fields_parent_id"), "profile_fields", ["parent_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_profile_fields_parent_id"), table_name="profile_fields")
    op.drop_index(op.f("ix_profile_fields_parent_type"), table_name="profile_fields")
    op.drop_table("profile_fields")
    # users 归账号服务所有，不在此回滚
