"""
File: app/domains/profile_fields/constants.py
Description: 自定义资料字段领域常量 (错误码 + 成功提示 + 默认权限名)
Namespace: profile_fields.*

Author: jinmozhe
Created: 2026-03-02
"""

from starlette.status import HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

from app.core.error_code import BaseErrorCode

# 字段值归属实体类型 (ProfileFieldValue.parent_type)
USER_PARENT_TYPE = "users"

# 字段权限策略的默认值
DEFAULT_VIEW_PERMISSION = "view_user_field"
DEFAULT_EDIT_PERMISSION = "update_user_field"

# 需要做选项文案转换的表单类型
SELECT_FORM_TYPE = "select"

# Schema 文件扩展名
SCHEMA_FILE_PATTERN = "*.json"


class ProfileFieldError(BaseErrorCode):
    """
    自定义资料字段领域错误定义
    Tuple Structure: (HTTP_Status, Code_String, Default_Message)
    """

    USER_NOT_FOUND = (HTTP_404_NOT_FOUND, "profile_fields.user_not_found", "用户不存在")

    # Schema 文件格式错误 (运维配置问题，返回 500)
    SCHEMA_PARSE_ERROR = (
        HTTP_500_INTERNAL_SERVER_ERROR,
        "profile_fields.schema_parse_error",
        "字段定义文件格式错误",
    )

    PERSISTENCE_ERROR = (
        HTTP_500_INTERNAL_SERVER_ERROR,
        "profile_fields.persistence_error",
        "字段值读写失败",
    )

    AUTHORIZATION_CHECK_ERROR = (
        HTTP_500_INTERNAL_SERVER_ERROR,
        "profile_fields.authorization_check_error",
        "权限校验失败",
    )


class ProfileFieldMsg:
    """成功提示文案"""

    FETCH_SUCCESS = "获取资料字段成功"
    UPDATE_SUCCESS = "资料字段已更新"
    CACHE_CLEARED = "字段定义缓存已清除"
