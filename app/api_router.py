"""
File: app/api_router.py
Description: 根 API 路由聚合层

聚合所有业务领域的 Router，统一设置前缀与 OpenAPI 标签。

Author: jinmozhe
Created: 2025-12-05
Updated: 2026-03-02 (Profile Fields Domain)
"""

from fastapi import APIRouter

from app.domains.profile_fields.router import router as profile_fields_router

api_router = APIRouter()

# 自定义资料字段模块 (Profile Fields Domain)
api_router.include_router(
    profile_fields_router, prefix="/profile-fields", tags=["profile-fields"]
)
