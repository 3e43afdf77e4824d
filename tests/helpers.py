"""
File: tests/helpers.py
Description: 测试辅助函数与测试用字段定义

Author: jinmozhe
Created: 2026-03-02
"""

from pathlib import Path
from typing import Any

import orjson

from app.core.security import create_access_token
from app.db.models import User

# 测试用字段定义
BASE_SCHEMA: dict[str, Any] = {
    "nickname": {"form": {"type": "text", "default": "Anon"}},
    "country": {
        "form": {
            "type": "select",
            "default": "a",
            "options": {"a": "Alpha", "b": "Beta", "z": ""},
        }
    },
    "bio": {"form": {"type": "textarea"}},
    "secret": {
        "form": {"type": "text", "default": "hidden"},
        "permission": {"view_own": False, "edit_own": False},
    },
    "badge": {
        "form": {"type": "text", "default": "none"},
        "permission": {"edit_own": False, "edit": "manage_badges"},
    },
}


def write_schema(root: Path, filename: str, document: Any) -> Path:
    """在 <root>/schema/userProfile/ 下写入一个字段定义文件 (bytes 原样写入)"""
    location = root / "schema" / "userProfile"
    location.mkdir(parents=True, exist_ok=True)
    path = location / filename
    if isinstance(document, bytes):
        path.write_bytes(document)
    else:
        path.write_bytes(orjson.dumps(document))
    return path


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
