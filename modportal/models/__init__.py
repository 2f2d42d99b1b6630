"""
ModPortal 数据模型包

包含版本、配置模型和 API 模型定义。
"""

from modportal.models.version import Version
from modportal.models.config import (
    Credentials,
    ModPortalConfig,
    load_config,
)
from modportal.models.api import (
    DependencyModifier,
    DependencyConstraint,
    Release,
    Package,
    InstalledPackage,
    UpdateResult,
    SaveModEntry,
    SaveModList,
)

__all__ = [
    "Version",
    # 配置模型
    "Credentials",
    "ModPortalConfig",
    "load_config",
    # API 模型
    "DependencyModifier",
    "DependencyConstraint",
    "Release",
    "Package",
    "InstalledPackage",
    "UpdateResult",
    "SaveModEntry",
    "SaveModList",
]
