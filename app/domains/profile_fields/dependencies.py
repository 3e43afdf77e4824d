"""
File: app/domains/profile_fields/dependencies.py
Description: 自定义资料字段领域依赖注入 (DI)

依赖链：
DBSession → ProfileFieldRepository ┐
SchemaCache / ResourceLocator / Authorizer ┴→ ProfileFieldService → ProfileFieldServiceDep
DBSession → UserRepository → TargetUser (按路径参数 user_id 查询)

Author: jinmozhe
Created: 2026-03-02
"""

import uuid
from typing import Annotated

from fastapi import Depends

from app.api.deps import DBSession
from app.core.authorizer import Authorizer, get_authorizer
from app.core.cache import SchemaCache, get_schema_cache
from app.core.exceptions import AppException
from app.core.locator import ResourceLocator, get_resource_locator
from app.db.models.profile_field import ProfileFieldValue
from app.db.models.user import User
from app.domains.profile_fields.constants import ProfileFieldError
from app.domains.profile_fields.repository import ProfileFieldRepository
from app.domains.profile_fields.service import ProfileFieldService
from app.domains.users.repository import UserRepository


async def get_profile_field_repository(session: DBSession) -> ProfileFieldRepository:
    return ProfileFieldRepository(model=ProfileFieldValue, session=session)


ProfileFieldRepoDep = Annotated[ProfileFieldRepository, Depends(get_profile_field_repository)]


async def get_profile_field_service(
    repo: ProfileFieldRepoDep,
    cache: Annotated[SchemaCache, Depends(get_schema_cache)],
    locator: Annotated[ResourceLocator, Depends(get_resource_locator)],
    authorizer: Annotated[Authorizer, Depends(get_authorizer)],
) -> ProfileFieldService:
    """
    获取字段服务实例。
    测试中可通过 app.dependency_overrides 替换任一协作者。
    """
    return ProfileFieldService(
        repo=repo, cache=cache, locator=locator, authorizer=authorizer
    )


async def get_target_user(user_id: uuid.UUID, session: DBSession) -> User:
    """按路径参数查询目标用户，不存在或已软删除时返回 404"""
    user = await UserRepository(model=User, session=session).get_active(user_id)
    if user is None:
        raise AppException(ProfileFieldError.USER_NOT_FOUND)
    return user


# ==============================================================================
# 导出类型别名，供 Router 层使用
# ==============================================================================

ProfileFieldServiceDep = Annotated[ProfileFieldService, Depends(get_profile_field_service)]
TargetUser = Annotated[User, Depends(get_target_user)]
