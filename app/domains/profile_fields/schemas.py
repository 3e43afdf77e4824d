"""
File: app/domains/profile_fields/schemas.py
Description: 自定义资料字段 Pydantic 模型

字段定义文件 (JSON) 结构：
{
    "<field_key>": {
        "form": {"type": "select", "default": "a", "options": {"a": "Alpha"}},
        "permission": {"view_own": true, "view": "view_user_field",
                       "edit_own": true, "edit": "update_user_field"}
    }
}

1. FieldPermission: 字段级查看/编辑权限策略 (可选)
2. FieldForm: 表单类型、默认值、选项 (允许额外的展示属性，如 label)
3. FieldDefinition: 单个字段定义
4. FieldSchema: 有序的 key -> FieldDefinition 映射

Author: jinmozhe
Created: 2026-03-02
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from app.domains.profile_fields.constants import (
    DEFAULT_EDIT_PERMISSION,
    DEFAULT_VIEW_PERMISSION,
)


class FieldPermission(BaseModel):
    """
    字段权限策略。
    *_own: 本人是否可查看/编辑；view/edit: 他人访问时需要的权限名。
    """

    view_own: bool = Field(default=True, description="本人可查看")
    view: str = Field(default=DEFAULT_VIEW_PERMISSION, description="他人查看所需权限")
    edit_own: bool = Field(default=True, description="本人可编辑")
    edit: str = Field(default=DEFAULT_EDIT_PERMISSION, description="他人编辑所需权限")

    def for_mode(self, edit_mode: bool) -> tuple[bool, str]:
        """返回 (本人是否允许, 他人所需权限名)"""
        if edit_mode:
            return self.edit_own, self.edit
        return self.view_own, self.view


class FieldForm(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = Field(..., description="表单类型 (text / select / ...)")
    default: Any = Field(default=None, description="默认值")
    options: dict[str, Any] | None = Field(
        default=None, description="选项值 -> 展示文案 (select)"
    )

    def option_label(self, value: Any) -> Any:
        """按选项值查找展示文案，不存在时返回 None"""
        if not self.options or value is None:
            return None
        return self.options.get(str(value))


class FieldDefinition(BaseModel):
    model_config = ConfigDict(extra="allow")

    form: FieldForm
    permission: FieldPermission | None = None

    @property
    def default_value(self) -> Any:
        """未配置默认值时为空字符串"""
        return "" if self.form.default is None else self.form.default


FieldSchema = dict[str, FieldDefinition]

field_schema_adapter: TypeAdapter[FieldSchema] = TypeAdapter(FieldSchema)
