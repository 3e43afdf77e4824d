"""
File: app/domains/profile_fields/router.py
Description: 自定义资料字段 HTTP 路由层

1. /me 系列接口：当前用户查看/更新自己的字段
2. /users/{user_id} 系列接口：查看/更新他人字段 (按字段权限过滤)
3. /schema 接口：当前用户可见的字段定义 (用于渲染表单)
4. DELETE /schema/cache：超级管理员清除字段定义缓存

所有接口均需鉴权；无权访问的字段直接从结果中省略，不返回 403。

Author: jinmozhe
Created: 2026-03-02
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Request

from app.api.deps import CurrentUser, SuperUser
from app.core.response import ResponseModel
from app.domains.profile_fields.constants import ProfileFieldMsg
from app.domains.profile_fields.dependencies import ProfileFieldServiceDep, TargetUser

router = APIRouter()

ProfileFieldsBody = Annotated[
    dict[str, Any],
    Body(
        description="字段 Key -> 新值，仅更新传入的字段 (PATCH 语义)",
        examples=[{"nickname": "Bob", "country": "cn"}],
    ),
]


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


# ------------------------------------------------------------------------------
# Schema
# ------------------------------------------------------------------------------


@router.get(
    "/schema",
    response_model=ResponseModel[dict[str, Any]],
    summary="获取我可见的字段定义",
)
async def read_field_schema(
    request: Request,
    current_user: CurrentUser,
    service: ProfileFieldServiceDep,
    edit: bool = False,
) -> ResponseModel[dict[str, Any]]:
    """edit=true 时返回我可编辑的字段定义"""
    schema = await service.get_field_schema(current_user, current_user, edit_mode=edit)

    return ResponseModel.success(
        data={
            key: field.model_dump(mode="json", exclude_none=True)
            for key, field in schema.items()
        },
        request_id=_request_id(request),
    )


@router.delete(
    "/schema/cache",
    response_model=ResponseModel[None],
    summary="清除字段定义缓存",
    description="字段定义文件变更后调用。仅超级管理员可用。",
)
async def clear_field_schema_cache(
    request: Request,
    _: SuperUser,
    service: ProfileFieldServiceDep,
) -> ResponseModel[None]:
    await service.invalidate_schema()

    return ResponseModel.success(
        message=ProfileFieldMsg.CACHE_CLEARED, request_id=_request_id(request)
    )


# ------------------------------------------------------------------------------
# Current user
# ------------------------------------------------------------------------------


@router.get(
    "/me",
    response_model=ResponseModel[dict[str, Any]],
    summary="获取我的资料字段",
)
async def read_my_profile_fields(
    request: Request,
    current_user: CurrentUser,
    service: ProfileFieldServiceDep,
) -> ResponseModel[dict[str, Any]]:
    data = await service.get_profile_fields(current_user, current_user)

    return ResponseModel.success(
        data=data, message=ProfileFieldMsg.FETCH_SUCCESS, request_id=_request_id(request)
    )


@router.patch(
    "/me",
    response_model=ResponseModel[dict[str, Any]],
    summary="更新我的资料字段",
)
async def update_my_profile_fields(
    request: Request,
    body: ProfileFieldsBody,
    current_user: CurrentUser,
    service: ProfileFieldServiceDep,
) -> ResponseModel[dict[str, Any]]:
    data = await service.update_profile_fields(current_user, current_user, body)

    return ResponseModel.success(
        data=data, message=ProfileFieldMsg.UPDATE_SUCCESS, request_id=_request_id(request)
    )


# ------------------------------------------------------------------------------
# Other users
# ------------------------------------------------------------------------------


@router.get(
    "/users/{user_id}",
    response_model=ResponseModel[dict[str, Any]],
    summary="获取指定用户的资料字段",
)
async def read_user_profile_fields(
    request: Request,
    current_user: CurrentUser,
    target_user: TargetUser,
    service: ProfileFieldServiceDep,
) -> ResponseModel[dict[str, Any]]:
    data = await service.get_profile_fields(current_user, target_user)

    return ResponseModel.success(
        data=data, message=ProfileFieldMsg.FETCH_SUCCESS, request_id=_request_id(request)
    )


@router.patch(
    "/users/{user_id}",
    response_model=ResponseModel[dict[str, Any]],
    summary="更新指定用户的资料字段",
)
async def update_user_profile_fields(
    request: Request,
    body: ProfileFieldsBody,
    current_user: CurrentUser,
    target_user: TargetUser,
    service: ProfileFieldServiceDep,
) -> ResponseModel[dict[str, Any]]:
    data = await service.update_profile_fields(current_user, target_user, body)

    return ResponseModel.success(
        data=data, message=ProfileFieldMsg.UPDATE_SUCCESS, request_id=_request_id(request)
    )
