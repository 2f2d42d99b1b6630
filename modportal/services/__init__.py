"""
ModPortal 服务层

包含业务逻辑服务：API 客户端、版本解析、依赖处理、存档解析。
"""

from modportal.services.api_client import ModPortalClient
from modportal.services.version_resolver import VersionResolver
from modportal.services.dependency_resolver import (
    DependencyResolver,
    parse_dependency,
    resolve_dependency_set,
)
from modportal.services.save_decoder import SaveArchiveDecoder, decode_mod_list

__all__ = [
    "ModPortalClient",
    "VersionResolver",
    "DependencyResolver",
    "parse_dependency",
    "resolve_dependency_set",
    "SaveArchiveDecoder",
    "decode_mod_list",
]
