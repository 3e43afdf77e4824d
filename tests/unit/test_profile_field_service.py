"""
File: tests/unit/test_profile_field_service.py
Description: 自定义资料字段服务单元测试 (读取 / 写入)

本模块测试 ProfileFieldService 的核心业务逻辑：
1. 默认值解析与已保存值覆盖
2. select 字段选项文案转换 (含回退)
3. PATCH 语义写入、幂等性、未知 Key 忽略
4. 存储层异常转换为 PersistenceError

Author: jinmozhe
Created: 2026-03-02
"""

from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorizer import SuperuserAuthorizer
from app.core.cache import MemoryCache
from app.core.locator import ResourceLocator
from app.db.models import ProfileFieldValue, User
from app.domains.profile_fields.constants import USER_PARENT_TYPE
from app.domains.profile_fields.exceptions import PersistenceError
from app.domains.profile_fields.repository import ProfileFieldRepository
from app.domains.profile_fields.service import ProfileFieldService, to_stored_value
from tests.helpers import write_schema


async def _row_count(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(ProfileFieldValue))
    return result.scalar_one()


# ------------------------------------------------------------------------------
# Read
# ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_profile_defaults(service: ProfileFieldService, user: User) -> None:
    """测试：没有已保存值时，每个字段返回默认值 (未配置默认值时为空字符串)"""
    profile = await service.get_profile(user)

    assert profile == {
        "nickname": "Anon",
        "country": "a",
        "bio": "",
        "secret": "hidden",
        "badge": "none",
    }
    # 顺序与 Schema 一致
    assert list(profile) == ["nickname", "country", "bio", "secret", "badge"]


@pytest.mark.asyncio
async def test_get_profile_does_not_create_rows(
    service: ProfileFieldService, user: User, db_session: AsyncSession
) -> None:
    """测试：读取不会落库"""
    await service.get_profile(user)

    assert await _row_count(db_session) == 0


@pytest.mark.asyncio
async def test_get_profile_stored_value_wins(
    service: ProfileFieldService,
    repo: ProfileFieldRepository,
    db_session: AsyncSession,
    user: User,
) -> None:
    """测试：已保存值覆盖默认值；Schema 之外的已保存值被忽略"""
    await repo.upsert(USER_PARENT_TYPE, user.id, "nickname", "Bob")
    await repo.upsert(USER_PARENT_TYPE, user.id, "removed_field", "stale")
    await db_session.commit()

    profile = await service.get_profile(user)

    assert profile["nickname"] == "Bob"
    assert "removed_field" not in profile


@pytest.mark.asyncio
async def test_get_profile_is_per_user(
    service: ProfileFieldService, user: User, other_user: User
) -> None:
    """测试：字段值按用户隔离"""
    await service.set_profile(user, {"nickname": "Alice"})

    assert (await service.get_profile(other_user))["nickname"] == "Anon"


@pytest.mark.asyncio
async def test_get_profile_transform_select(
    service: ProfileFieldService, user: User
) -> None:
    """测试：transform=True 时 select 字段转换为展示文案"""
    assert (await service.get_profile(user, transform=True))["country"] == "Alpha"

    await service.set_profile(user, {"country": "b"})
    assert (await service.get_profile(user, transform=True))["country"] == "Beta"

    # 未转换时仍为原始选项值
    assert (await service.get_profile(user))["country"] == "b"


@pytest.mark.asyncio
async def test_get_profile_transform_fallback(
    service: ProfileFieldService, user: User
) -> None:
    """测试：选项不存在或文案为空时回退为原始值"""
    await service.set_profile(user, {"country": "q"})
    assert (await service.get_profile(user, transform=True))["country"] == "q"

    await service.set_profile(user, {"country": "z"})
    assert (await service.get_profile(user, transform=True))["country"] == "z"


@pytest.mark.asyncio
async def test_transform_only_applies_to_select(
    service: ProfileFieldService, user: User
) -> None:
    """测试：非 select 字段即使值与某个选项相同也不转换"""
    await service.set_profile(user, {"nickname": "a"})

    assert (await service.get_profile(user, transform=True))["nickname"] == "a"


# ------------------------------------------------------------------------------
# Write
# ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_set_profile_end_to_end(
    repo: ProfileFieldRepository,
    cache: MemoryCache,
    authorizer: SuperuserAuthorizer,
    tmp_path: Path,
    user: User,
) -> None:
    """测试：单字段 Schema 的完整读写流程"""
    root = tmp_path / "single"
    write_schema(root, "profile.json", {"nickname": {"form": {"type": "text", "default": "Anon"}}})
    service = ProfileFieldService(
        repo=repo, cache=cache, locator=ResourceLocator([root]), authorizer=authorizer
    )

    assert await service.get_profile(user) == {"nickname": "Anon"}

    await service.set_profile(user, {"nickname": "Bob"})

    assert await service.get_profile(user) == {"nickname": "Bob"}


@pytest.mark.asyncio
async def test_set_profile_is_merge_patch(
    service: ProfileFieldService, user: User
) -> None:
    """测试：只更新传入的字段，其他字段保持不变"""
    await service.set_profile(user, {"nickname": "Bob", "bio": "hello"})
    await service.set_profile(user, {"bio": "updated"})

    profile = await service.get_profile(user)
    assert profile["nickname"] == "Bob"
    assert profile["bio"] == "updated"


@pytest.mark.asyncio
async def test_set_profile_is_idempotent(
    service: ProfileFieldService,
    repo: ProfileFieldRepository,
    db_session: AsyncSession,
    user: User,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """测试：重复提交相同数据不会产生额外写入"""
    await service.set_profile(user, {"nickname": "Bob", "bio": "hi"})

    calls: list[str] = []
    original_upsert = repo.upsert

    async def spy_upsert(parent_type, parent_id, slug, value):  # type: ignore[no-untyped-def]
        calls.append(slug)
        return await original_upsert(parent_type, parent_id, slug, value)

    monkeypatch.setattr(repo, "upsert", spy_upsert)

    await service.set_profile(user, {"nickname": "Bob", "bio": "hi"})

    assert calls == []
    assert await _row_count(db_session) == 2
    assert (await service.get_profile(user))["nickname"] == "Bob"


@pytest.mark.asyncio
async def test_set_profile_skips_unchanged_defaults(
    service: ProfileFieldService, user: User, db_session: AsyncSession
) -> None:
    """测试：提交值等于默认值时不创建记录"""
    await service.set_profile(user, {"nickname": "Anon", "bio": ""})

    assert await _row_count(db_session) == 0


@pytest.mark.asyncio
async def test_set_profile_ignores_unknown_keys(
    service: ProfileFieldService, user: User, db_session: AsyncSession
) -> None:
    """测试：Schema 中不存在的 Key 被忽略"""
    await service.set_profile(user, {"unknown": "value"})

    assert await _row_count(db_session) == 0


@pytest.mark.asyncio
async def test_set_profile_updates_existing_row(
    service: ProfileFieldService, user: User, db_session: AsyncSession
) -> None:
    """测试：同一字段多次写入只保留一条记录"""
    await service.set_profile(user, {"nickname": "Bob"})
    await service.set_profile(user, {"nickname": "Carol"})

    assert await _row_count(db_session) == 1
    assert (await service.get_profile(user))["nickname"] == "Carol"


@pytest.mark.asyncio
async def test_set_profile_stores_scalars_as_text(
    service: ProfileFieldService, user: User
) -> None:
    """测试：非字符串值以文本存储"""
    await service.set_profile(user, {"bio": 42})

    assert (await service.get_profile(user))["bio"] == "42"


@pytest.mark.asyncio
async def test_set_profile_wraps_storage_errors(
    service: ProfileFieldService,
    repo: ProfileFieldRepository,
    user: User,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """测试：存储层异常转换为 PersistenceError"""

    async def broken_upsert(*args: object, **kwargs: object) -> None:
        raise OperationalError("UPDATE profile_fields", {}, Exception("disk I/O error"))

    monkeypatch.setattr(repo, "upsert", broken_upsert)

    with pytest.raises(PersistenceError) as excinfo:
        await service.set_profile(user, {"nickname": "Bob"})

    assert excinfo.value.code == "profile_fields.persistence_error"


@pytest.mark.asyncio
async def test_set_profile_booleans_match_stored_flags(
    service: ProfileFieldService,
    repo: ProfileFieldRepository,
    user: User,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """测试：布尔值以 "1" / "0" 存储，与已保存的标记值比较相等"""
    await service.set_profile(user, {"bio": True})
    assert (await service.get_profile(user))["bio"] == "1"

    calls: list[str] = []
    original_upsert = repo.upsert

    async def spy_upsert(parent_type, parent_id, slug, value):  # type: ignore[no-untyped-def]
        calls.append(slug)
        return await original_upsert(parent_type, parent_id, slug, value)

    monkeypatch.setattr(repo, "upsert", spy_upsert)

    await service.set_profile(user, {"bio": "1"})
    assert calls == []

    await service.set_profile(user, {"bio": False})
    assert calls == ["bio"]
    assert (await service.get_profile(user))["bio"] == "0"

def test_to_stored_value() -> None:
    """测试：提交值的文本转换规则"""
    assert to_stored_value(None) is None
    assert to_stored_value("x") == "x"
    assert to_stored_value(3) == "3"
    assert to_stored_value(True) == "1"
    assert to_stored_value(False) == "0"
    assert to_stored_value(["a", "b"]) == '["a","b"]'
