"""
File: app/core/locator.py
Description: 资源定位器 (Resource Locator)

多个资源根目录 (例如：核心包 + 各业务扩展包) 可以提供同一命名空间下的资源，
例如 <root>/schema/userProfile/*.json。
根目录按"优先级从低到高"配置，定位结果按"优先级从高到低"返回。

Author: jinmozhe
Created: 2026-03-02
"""

from collections.abc import Iterable
from pathlib import Path

from app.core.config import settings

# 资源类型目录 (与命名空间拼接: <root>/schema/<namespace>)
SCHEMA_RESOURCE_DIR = "schema"


class ResourceLocator:
    """
    资源定位器。

    用法:
        locator = ResourceLocator(["app/resources", "plugins/acme"])
        paths = locator.find_resources("userProfile")
        # -> [Path("plugins/acme/schema/userProfile"), Path("app/resources/schema/userProfile")]
    """

    def __init__(self, roots: Iterable[str | Path], resource_dir: str = SCHEMA_RESOURCE_DIR):
        self.roots = [Path(root) for root in roots]
        self.resource_dir = resource_dir

    def find_resources(
        self,
        namespace: str,
        recursive: bool = True,
        include_files: bool = False,
    ) -> list[Path]:
        """
        查找命名空间在所有根目录下的位置。

        Args:
            namespace: 资源命名空间 (如 "userProfile")
            recursive: True 返回所有根目录中的匹配项；False 仅返回优先级最高的一项
            include_files: 是否也返回同名文件 (默认只返回目录)

        Returns:
            list[Path]: 按优先级从高到低排列的已存在路径
        """
        found: list[Path] = []

        for root in reversed(self.roots):
            candidate = root / self.resource_dir / namespace
            if candidate.is_dir() or (include_files and candidate.is_file()):
                found.append(candidate)
                if not recursive:
                    break

        return found


def get_resource_locator() -> ResourceLocator:
    """依赖注入: 基于全局配置构造定位器"""
    return ResourceLocator(settings.CUSTOM_PROFILE_SCHEMA_PATHS)
