"""
File: app/domains/profile_fields/exceptions.py
Description: 自定义资料字段领域异常

三类异常均为 AppException 子类，由全局处理器映射为统一失败信封。
权限拒绝不是异常：被拒绝的字段直接从结果中省略。

Author: jinmozhe
Created: 2026-03-02
"""

from app.core.exceptions import AppException
from app.domains.profile_fields.constants import ProfileFieldError


class SchemaParseError(AppException):
    """字段定义文件无法解析或不符合字段结构"""

    default_error = ProfileFieldError.SCHEMA_PARSE_ERROR


class PersistenceError(AppException):
    """字段值读写时存储层失败 (不重试)"""

    default_error = ProfileFieldError.PERSISTENCE_ERROR


class AuthorizationCheckError(AppException):
    """授权器内部失败 (不等同于拒绝访问)"""

    default_error = ProfileFieldError.AUTHORIZATION_CHECK_ERROR
