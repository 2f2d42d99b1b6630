"""
API 数据模型

定义模组门户相关的数据类，包括模组、发布版本、依赖约束、本地模组与存档模组。
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from modportal.models.version import Version


class DependencyModifier(Enum):
    """依赖修饰符"""

    REQUIRED = "required"
    OPTIONAL = "optional"  # ?
    HIDDEN_OPTIONAL = "hidden_optional"  # (?)
    INCOMPATIBLE = "incompatible"  # !
    UNORDERED = "unordered"  # ~ 必需，但不影响加载顺序


@dataclass
class DependencyConstraint:
    """依赖约束（版本范围只保留，不参与过滤）"""

    name: str
    modifier: DependencyModifier = DependencyModifier.REQUIRED
    operator: Optional[str] = None
    version: Optional[str] = None

    @property
    def is_optional(self) -> bool:
        return self.modifier in (
            DependencyModifier.OPTIONAL,
            DependencyModifier.HIDDEN_OPTIONAL,
        )


@dataclass
class Release:
    """
    模组发布版本。
    """

    version: Version
    game_version: Version
    download_url: str
    file_name: str = ""
    sha1: Optional[str] = None
    released_at: Optional[str] = None
    dependencies: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.file_name and self.download_url:
            self.file_name = os.path.basename(self.download_url.split("?")[0])

    @classmethod
    def from_portal(cls, data: dict) -> "Release":
        """
        将模组门户 API 返回的发布信息转换为 Release 对象。
        """
        info = data.get("info_json") or {}
        return cls(
            version=Version.parse(data["version"]),
            game_version=Version.parse(info.get("factorio_version", "0.0.0")),
            download_url=data.get("download_url", ""),
            file_name=data.get("file_name", ""),
            sha1=data.get("sha1"),
            released_at=data.get("released_at"),
            dependencies=list(info.get("dependencies", [])),
        )


@dataclass
class Package:
    """
    模组信息，releases 按从新到旧排列。
    """

    name: str
    title: str = ""
    summary: str = ""
    owner: str = ""
    releases: List[Release] = field(default_factory=list)

    @classmethod
    def from_portal(cls, data: dict) -> "Package":
        # 门户按从旧到新返回 releases
        return cls(
            name=data["name"],
            title=data.get("title", ""),
            summary=data.get("summary", ""),
            owner=data.get("owner", ""),
            releases=sorted(
                (Release.from_portal(r) for r in data.get("releases", [])),
                key=lambda r: r.version,
                reverse=True,
            ),
        )


@dataclass
class InstalledPackage:
    """本地模组目录中的模组"""

    name: str
    version: Version
    enabled: bool = True
    file_name: Optional[str] = None
    info: Optional[Dict[str, Any]] = None


@dataclass
class UpdateResult:
    """更新检查结果"""

    name: str
    has_update: bool
    version: Optional[Version] = None
    package: Optional[Package] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name, "hasUpdate": self.has_update}
        if self.has_update:
            result["version"] = str(self.version)
        return result


@dataclass
class SaveModEntry:
    """存档中记录的模组及其精确版本"""

    name: str
    version: Version
    reserved: bytes = b""  # 每条记录末尾 4 字节，含义未知


@dataclass
class SaveModList:
    """单个存档的模组列表"""

    name: str
    mods: List[SaveModEntry] = field(default_factory=list)
