"""
File: app/domains/profile_fields/service.py
Description: 自定义资料字段领域服务 (业务逻辑层)

本模块封装自定义资料字段的核心流程：
1. Schema 加载：定位 -> 合并 -> 校验，按配置走永久缓存
2. 资料读取：Schema 默认值 + 已保存值，可选将 select 选项值转换为展示文案
3. 资料写入：与当前值比对，仅写入变化的字段 (PATCH 语义)
4. 权限过滤：按字段权限策略，原地移除无权查看/编辑的字段

数据流：load_schema -> get_profile -> apply_permissions (读) / set_profile (写)

注意：
- 写操作的事务提交 (Commit) 由本层负责，多个字段在同一事务中提交。
- 写入不会使 Schema 缓存失效：Schema 与字段值相互独立，Schema 变更后需调用
  invalidate_schema()。

Author: jinmozhe
Created: 2026-03-02
"""

from collections.abc import Mapping
from typing import Any

import orjson
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from app.core.authorizer import Authorizer
from app.core.cache import SchemaCache
from app.core.config import Settings, settings
from app.core.exceptions import AppException
from app.core.locator import ResourceLocator
from app.core.logging import logger
from app.db.models.user import User
from app.domains.profile_fields.constants import SELECT_FORM_TYPE, USER_PARENT_TYPE
from app.domains.profile_fields.exceptions import (
    AuthorizationCheckError,
    PersistenceError,
)
from app.domains.profile_fields.loader import load_raw_schema, parse_schema
from app.domains.profile_fields.repository import ProfileFieldRepository
from app.domains.profile_fields.schemas import FieldSchema


def to_stored_value(value: Any) -> str | None:
    """
    将提交值转换为文本存储形式。
    None 保持为 NULL；布尔值存为 "1" / "0"；对象/数组使用 JSON 文本。
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, dict | list):
        return orjson.dumps(value).decode("utf-8")
    return str(value)


class ProfileFieldService:
    """
    自定义资料字段领域服务。

    所有协作者通过构造函数显式注入，便于测试替换：
    - repo: 字段值仓储
    - cache: Schema 缓存
    - locator: Schema 文件定位器
    - authorizer: 权限判定器
    - config: 配置对象 (默认全局 settings)
    """

    def __init__(
        self,
        repo: ProfileFieldRepository,
        cache: SchemaCache,
        locator: ResourceLocator,
        authorizer: Authorizer,
        config: Settings = settings,
    ):
        self.repo = repo
        self.cache = cache
        self.locator = locator
        self.authorizer = authorizer
        self.config = config

    # --------------------------------------------------------------------------
    # 1. Schema
    # --------------------------------------------------------------------------

    async def load_schema(self) -> FieldSchema:
        """
        获取合并后的字段 Schema。
        开启 CUSTOM_PROFILE_CACHE 时，首次计算结果永久缓存直至 invalidate_schema()。
        """
        if self.config.CUSTOM_PROFILE_CACHE:
            raw = await self.cache.remember_forever(
                self.config.CUSTOM_PROFILE_CACHE_KEY, self._build_raw_schema
            )
        else:
            raw = await self._build_raw_schema()

        return parse_schema(raw)

    async def invalidate_schema(self) -> None:
        """清除 Schema 缓存，下一次 load_schema() 将重新读取文件"""
        await self.cache.forget(self.config.CUSTOM_PROFILE_CACHE_KEY)
        logger.info("Profile field schema cache invalidated")

    async def _build_raw_schema(self) -> dict[str, Any]:
        # 定位结果按优先级从高到低，反转后优先级最高的位置最后合并 (覆盖前者)
        locations = self.locator.find_resources(
            self.config.CUSTOM_PROFILE_SCHEMA_NAMESPACE, recursive=True, include_files=False
        )
        raw = await run_in_threadpool(load_raw_schema, list(reversed(locations)))

        # 先校验再返回，格式错误的 Schema 不会进入缓存
        parse_schema(raw)

        logger.bind(fields=len(raw), locations=len(locations)).info(
            "Profile field schema built"
        )
        return raw

    # --------------------------------------------------------------------------
    # 2. 读取
    # --------------------------------------------------------------------------

    async def get_profile(
        self,
        user: User,
        transform: bool = False,
        schema: FieldSchema | None = None,
    ) -> dict[str, Any]:
        """
        返回用户的完整资料视图：Schema 中每个字段一项，顺序与 Schema 一致。

        Args:
            user: 目标用户
            transform: 是否将 select 字段的选项值转换为展示文案
            schema: 已加载的 Schema (省略时自动加载)
        """
        if schema is None:
            schema = await self.load_schema()

        try:
            stored = await self.repo.get_values(USER_PARENT_TYPE, user.id)
        except SQLAlchemyError as exc:
            raise PersistenceError(data={"user_id": str(user.id)}) from exc

        profile: dict[str, Any] = {}
        for key, field in schema.items():
            value = stored.get(key, field.default_value)

            # 找不到文案 (或文案为空) 时保留原值
            if transform and field.form.type == SELECT_FORM_TYPE:
                value = field.form.option_label(value) or value

            profile[key] = value

        return profile

    # --------------------------------------------------------------------------
    # 3. 写入
    # --------------------------------------------------------------------------

    async def set_profile(self, user: User, data: Mapping[str, Any]) -> None:
        """
        写入一个或多个字段值。

        - 仅处理 Schema 中存在的字段，未知 Key 忽略
        - 未提交的字段保持不变
        - 与当前值相同的字段不写库 (重复提交是幂等的)
        """
        current = await self.get_profile(user)

        changed: dict[str, str | None] = {}
        for slug, value in current.items():
            if slug not in data:
                continue
            new_value = to_stored_value(data[slug])
            if new_value != to_stored_value(value):
                changed[slug] = new_value

        if not changed:
            return

        try:
            for slug, value in changed.items():
                await self.repo.upsert(USER_PARENT_TYPE, user.id, slug, value)
            await self.repo.session.commit()
        except SQLAlchemyError as exc:
            await self.repo.session.rollback()
            raise PersistenceError(data={"user_id": str(user.id)}) from exc

        logger.bind(user_id=str(user.id), fields=sorted(changed)).info(
            "Profile fields updated"
        )

    # --------------------------------------------------------------------------
    # 4. 权限过滤
    # --------------------------------------------------------------------------

    async def apply_permissions(
        self,
        edit_mode: bool,
        schema: FieldSchema,
        profile: dict[str, Any],
        authorizer: Authorizer,
        acting_user: User,
        target_user: User | None = None,
    ) -> None:
        """
        原地移除 acting_user 无权查看 (edit_mode=False) 或编辑 (edit_mode=True)
        的字段，schema 与 profile 同步移除。

        判定规则 (仅对声明了 permission 的字段)：
        - 本人访问：字段的 view_own / edit_own 为 True 时允许
        - 他人访问：authorizer.check_access(acting_user, 权限名, {"user": target_user})
        未声明 permission 的字段始终保留。拒绝不会抛出异常。
        """
        if target_user is None:
            target_user = acting_user

        is_own = acting_user.id == target_user.id

        for key, field in list(schema.items()):
            if field.permission is None or key not in profile:
                continue

            own_allowed, permission = field.permission.for_mode(edit_mode)

            if is_own and own_allowed:
                continue
            if not is_own and await self._check_access(
                authorizer, acting_user, permission, target_user
            ):
                continue

            del profile[key]
            del schema[key]

    async def _check_access(
        self, authorizer: Authorizer, acting_user: User, permission: str, target_user: User
    ) -> bool:
        try:
            return await authorizer.check_access(
                acting_user, permission, {"user": target_user}
            )
        except AppException:
            raise
        except Exception as exc:
            raise AuthorizationCheckError(
                data={"permission": permission, "user_id": str(acting_user.id)}
            ) from exc

    # --------------------------------------------------------------------------
    # 5. 对外接口 (Router 使用)
    # --------------------------------------------------------------------------

    async def get_field_schema(
        self, acting_user: User, user: User, edit_mode: bool = False
    ) -> FieldSchema:
        """返回 acting_user 在 user 上可查看 (或可编辑) 的字段定义"""
        schema = await self.load_schema()
        profile = await self.get_profile(user, schema=schema)
        await self.apply_permissions(
            edit_mode, schema, profile, self.authorizer, acting_user, user
        )
        return schema

    async def get_profile_fields(
        self, acting_user: User, user: User, transform: bool = True
    ) -> dict[str, Any]:
        """返回经过权限过滤的用户资料字段值"""
        schema = await self.load_schema()
        profile = await self.get_profile(user, transform=transform, schema=schema)
        await self.apply_permissions(
            False, schema, profile, self.authorizer, acting_user, user
        )
        return profile

    async def update_profile_fields(
        self, acting_user: User, user: User, data: Mapping[str, Any]
    ) -> dict[str, Any]:
        """
        以 acting_user 身份更新 user 的字段。
        无权编辑的字段被静默丢弃，返回更新后的可见资料。
        """
        editable = await self.get_field_schema(acting_user, user, edit_mode=True)

        permitted = {key: value for key, value in data.items() if key in editable}
        dropped = sorted(set(data) - set(permitted))
        if dropped:
            logger.bind(
                user_id=str(user.id), acting_user_id=str(acting_user.id), fields=dropped
            ).debug("Profile fields dropped from update")

        await self.set_profile(user, permitted)

        return await self.get_profile_fields(acting_user, user)
