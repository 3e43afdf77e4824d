"""
File: app/domains/profile_fields/loader.py
Description: 字段定义文件加载与合并

本模块负责：
1. 读取各搜索位置下的 *.json 字段定义文件 (orjson)
2. 按顺序递归合并：后加载的文件覆盖先加载的同名 Key
3. 将合并结果校验为 FieldSchema

注意：
- 函数均为同步文件 IO，Service 层通过线程池调用。
- 无法访问的搜索位置直接跳过；任何格式错误都抛出 SchemaParseError，不返回部分结果。

Author: jinmozhe
Created: 2026-03-02
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson
from pydantic import ValidationError

from app.core.logging import logger
from app.domains.profile_fields.constants import SCHEMA_FILE_PATTERN
from app.domains.profile_fields.exceptions import SchemaParseError
from app.domains.profile_fields.schemas import FieldSchema, field_schema_adapter


def merge_documents(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    递归合并两个文档，返回新字典。
    两边都是对象时逐 Key 合并，否则 override 的值整体替换。
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_documents(merged[key], value)
        else:
            merged[key] = value
    return merged


def list_schema_files(location: Path) -> list[Path]:
    """
    列出搜索位置下的字段定义文件 (按文件名排序)。
    位置不可访问时返回空列表。
    """
    try:
        return sorted(path for path in location.glob(SCHEMA_FILE_PATTERN) if path.is_file())
    except OSError as exc:
        logger.bind(location=str(location), error=str(exc)).debug(
            "Schema location skipped"
        )
        return []


def read_schema_file(path: Path) -> dict[str, Any]:
    """读取并解析单个字段定义文件，顶层必须是对象"""
    try:
        document = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as exc:
        raise SchemaParseError(
            message=f"无法解析字段定义文件: {path.name}",
            data={"file": str(path), "error": str(exc)},
        ) from exc

    if not isinstance(document, dict):
        raise SchemaParseError(
            message=f"字段定义文件顶层必须是对象: {path.name}",
            data={"file": str(path)},
        )

    return document


def load_raw_schema(locations: Iterable[Path]) -> dict[str, Any]:
    """
    按给定顺序加载所有位置的字段定义并合并。
    调用方负责传入"优先级从低到高"的顺序。
    """
    merged: dict[str, Any] = {}

    for location in locations:
        for path in list_schema_files(location):
            merged = merge_documents(merged, read_schema_file(path))
            logger.bind(file=str(path)).debug("Schema file loaded")

    return merged


def parse_schema(raw: dict[str, Any]) -> FieldSchema:
    """
    将原始映射校验为 FieldSchema。
    值为 null 的字段视为被高优先级位置关闭，直接移除。
    """
    enabled = {key: value for key, value in raw.items() if value is not None}
    try:
        return field_schema_adapter.validate_python(enabled)
    except ValidationError as exc:
        raise SchemaParseError(
            data={"errors": [str(error["msg"]) for error in exc.errors()]},
        ) from exc
