"""
依赖处理服务

解析依赖声明字符串（"? name >= 1.0"），并按可选依赖策略过滤出需要安装的模组列表。
"""

import re
from typing import Dict, Iterable, List, Optional

from loguru import logger

from modportal.exceptions import ValidationError
from modportal.models import DependencyConstraint, DependencyModifier
from modportal.services.api_client import ModPortalClient
from modportal.services.version_resolver import VersionResolver


BASE_PACKAGE = "base"

# 顺序重要："(?)" 需要先于 "?" 匹配
_MARKERS = (
    ("(?)", DependencyModifier.HIDDEN_OPTIONAL),
    ("?", DependencyModifier.OPTIONAL),
    ("!", DependencyModifier.INCOMPATIBLE),
    ("~", DependencyModifier.UNORDERED),
)

_DECLARATION = re.compile(
    r"^(?P<name>[^<>=]*[^\s<>=])"
    r"(?:\s*(?P<operator><=|>=|<|>|=)\s*(?P<version>[^\s<>=]\S*))?\s*$"
)


def parse_dependency(declaration: str) -> DependencyConstraint:
    """
    解析单条依赖声明

    Args:
        declaration: 依赖声明，例如 "? optional-mod" 或 "required-mod >= 1.0"

    Returns:
        依赖约束
    """
    text = declaration.strip()
    modifier = DependencyModifier.REQUIRED

    for marker, marker_modifier in _MARKERS:
        if text.startswith(marker):
            modifier = marker_modifier
            text = text[len(marker):].lstrip()
            break

    match = _DECLARATION.match(text)
    if not match:
        raise ValidationError(
            f"无效的依赖声明: {declaration!r}", context={"declaration": declaration}
        )

    return DependencyConstraint(
        name=match.group("name"),
        modifier=modifier,
        operator=match.group("operator"),
        version=match.group("version"),
    )


def resolve_dependency_set(
    declarations: Iterable[str],
    include_optional: bool = False,
) -> List[Dict[str, str]]:
    """
    过滤依赖声明，得到需要安装的模组列表

    始终排除 base；不包含可选依赖时排除 "?" 与 "(?)"。
    "!" 不兼容声明不会被排除，保持原有行为。结果保持声明顺序，不去重。
    """
    result = []
    for declaration in declarations:
        constraint = parse_dependency(declaration)

        if constraint.name == BASE_PACKAGE:
            continue
        if constraint.is_optional and not include_optional:
            continue

        result.append({"name": constraint.name})
    return result


class DependencyResolver:
    """依赖解析器"""

    def __init__(
        self,
        client: ModPortalClient,
        version_resolver: Optional[VersionResolver] = None,
    ):
        self.client = client
        self.version_resolver = version_resolver or VersionResolver()

    async def get_dependencies(
        self,
        name: str,
        version: Optional[str] = None,
        include_optional: bool = False,
    ) -> List[Dict[str, str]]:
        """
        获取模组某个发布版本的依赖

        Args:
            name: 模组名称
            version: 发布版本（默认最新）
            include_optional: 是否包含可选依赖

        Returns:
            依赖列表 [{"name": ...}]
        """
        package = await self.client.get_package(name)
        release = self.version_resolver.select_release_to_download(
            package.releases, version, name=name
        )
        dependencies = resolve_dependency_set(release.dependencies, include_optional)
        logger.debug(
            f"[依赖] {name} {release.version}: "
            f"{', '.join(d['name'] for d in dependencies) or '无'}"
        )
        return dependencies
