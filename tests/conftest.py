"""
File: tests/conftest.py
Description: Pytest 全局 Fixtures 配置 (Async + 独立测试库)

1. 在导入 app 之前写入测试环境变量 (SQLite 测试库 + memory 缓存)
2. 每个测试使用独立的 SQLite 文件库 (tmp_path)，测试之间完全隔离
3. 提供用户工厂、Schema 目录、Service 与 HTTP 客户端 Fixtures

Author: jinmozhe
Created: 2025-11-26
Updated: 2026-03-02 (Profile Fields fixtures)
"""

import asyncio
import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any

if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# ------------------------------------------------------------------------------
# 1. 环境配置覆写 (必须在导入 app 之前)
# ------------------------------------------------------------------------------
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-profile-fields-0000")
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite+aiosqlite:///./.pytest_profile_fields.db")
os.environ.setdefault("CACHE_BACKEND", "memory")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.api.deps import get_db
from app.core.authorizer import SuperuserAuthorizer, get_authorizer
from app.core.cache import MemoryCache, get_schema_cache
from app.core.locator import ResourceLocator, get_resource_locator
from app.db.models import Base, ProfileFieldValue, User
from app.domains.profile_fields.repository import ProfileFieldRepository
from app.domains.profile_fields.service import ProfileFieldService
from app.main import app
from tests.helpers import BASE_SCHEMA, write_schema

# ------------------------------------------------------------------------------
# 2. 数据库 Fixtures
# ------------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """每个测试一个全新的 SQLite 文件库"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async_session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_factory() as session:
        yield session


UserFactory = Callable[..., Awaitable[User]]


@pytest.fixture
def make_user(db_session: AsyncSession) -> UserFactory:
    """创建并提交一个用户"""

    async def _make_user(**kwargs: Any) -> User:
        user = User(**kwargs)
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def user(make_user: UserFactory) -> User:
    return await make_user(username="alice")


@pytest_asyncio.fixture
async def other_user(make_user: UserFactory) -> User:
    return await make_user(username="bob")


@pytest_asyncio.fixture
async def superuser(make_user: UserFactory) -> User:
    return await make_user(username="root", is_superuser=True)


# ------------------------------------------------------------------------------
# 3. Profile Fields Fixtures
# ------------------------------------------------------------------------------


@pytest.fixture
def schema_root(tmp_path: Path) -> Path:
    root = tmp_path / "core"
    write_schema(root, "profile.json", BASE_SCHEMA)
    return root


@pytest.fixture
def locator(schema_root: Path) -> ResourceLocator:
    return ResourceLocator([schema_root])


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def authorizer() -> SuperuserAuthorizer:
    return SuperuserAuthorizer()


@pytest.fixture
def repo(db_session: AsyncSession) -> ProfileFieldRepository:
    return ProfileFieldRepository(model=ProfileFieldValue, session=db_session)


@pytest.fixture
def service(
    repo: ProfileFieldRepository,
    cache: MemoryCache,
    locator: ResourceLocator,
    authorizer: SuperuserAuthorizer,
) -> ProfileFieldService:
    return ProfileFieldService(
        repo=repo, cache=cache, locator=locator, authorizer=authorizer
    )


# ------------------------------------------------------------------------------
# 4. HTTP Fixtures
# ------------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    cache: MemoryCache,
    locator: ResourceLocator,
    authorizer: SuperuserAuthorizer,
) -> AsyncGenerator[AsyncClient, None]:
    """
    获取异步 HTTP 客户端。
    数据库会话、缓存、定位器与授权器均替换为测试实例。
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_schema_cache] = lambda: cache
    app.dependency_overrides[get_resource_locator] = lambda: locator
    app.dependency_overrides[get_authorizer] = lambda: authorizer

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"  # type: ignore
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
