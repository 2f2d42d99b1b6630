"""
ModPortal - Factorio 模组管理工具

检查并下载模组更新、解析依赖、保证模组目录中每个模组只保留一个版本、读取存档使用的模组。
"""

from modportal.exceptions import ModPortalError
from modportal.models import ModPortalConfig, Version
from modportal.orchestrator import ModPortalManager

__version__ = "0.1.0"

__all__ = [
    "ModPortalError",
    "ModPortalConfig",
    "ModPortalManager",
    "Version",
    "__version__",
]
