"""
File: alembic/env.py
Description: Alembic 迁移环境配置 (同步驱动)

策略：
- 迁移 (Migration): 使用 psycopg (Sync)，避免 EventLoop 问题
- 运行 (Runtime): 使用 asyncpg (Async)

迁移管理的表：users (账户映射) 与 profile_fields (自定义资料字段值)。

Author: jinmozhe
Created: 2025-11-26
Updated: 2026-03-02 (profile_fields)
"""

import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import create_engine, pool
from sqlalchemy.engine import make_url

from alembic import context  # type: ignore

# ------------------------------------------------------------------------------
# 0. 将项目根目录加入 sys.path
# ------------------------------------------------------------------------------
sys.path.insert(0, str(Path(__file__).parent.parent.resolve()))

# ------------------------------------------------------------------------------
# 1. 导入项目配置与模型
# ------------------------------------------------------------------------------
from app.core.config import settings
from app.db.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# ------------------------------------------------------------------------------
# 2. 构建同步数据库 URL
# ------------------------------------------------------------------------------
# settings 已完成 DSN 组装 (含密码编码)，这里只替换驱动
_url = make_url(str(settings.SQLALCHEMY_DATABASE_URI))
if _url.drivername == "postgresql+asyncpg":
    _url = _url.set(drivername="postgresql+psycopg")
elif _url.drivername == "sqlite+aiosqlite":
    _url = _url.set(drivername="sqlite")

sync_uri = _url.render_as_string(hide_password=False)

# configparser 插值符号转义
config.set_main_option("sqlalchemy.url", sync_uri.replace("%", "%%"))

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """离线模式迁移：生成 SQL 脚本而不实际连接数据库"""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """在线模式迁移：连接数据库并执行迁移"""
    connectable = create_engine(
        config.get_main_option("sqlalchemy.url") or "",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
