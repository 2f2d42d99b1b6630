"""
版本解析服务

判断已安装模组是否存在兼容当前游戏版本的更新，并选择要下载的发布版本。
"""

from typing import List, Optional, Sequence, Union

from loguru import logger

from modportal.exceptions import NotFoundError
from modportal.models import Release, UpdateResult, Version


VersionLike = Union[str, Version]


class VersionResolver:
    """版本解析器"""

    def check_for_update(
        self,
        installed_version: VersionLike,
        releases: Sequence[Release],
        target_game_version: VersionLike = Version.WILDCARD,
        name: str = "",
    ) -> UpdateResult:
        """
        检查是否存在可用更新

        releases 必须按从新到旧排列：返回第一个满足条件的版本，而不是全局最高版本。

        Args:
            installed_version: 已安装版本
            releases: 发布版本列表
            target_game_version: 目标游戏版本，"0.0.0" 表示接受任意游戏版本
            name: 模组名称（仅用于结果与日志）

        Returns:
            更新检查结果
        """
        installed = Version.parse(installed_version)
        target = Version.parse(target_game_version)

        for release in releases:
            if release.version <= installed:
                continue
            if not target.is_wildcard and release.game_version.minor != target.minor:
                continue

            logger.debug(
                f"[更新] {name or '模组'}: 发现更新 {installed} --> {release.version}"
            )
            return UpdateResult(name=name, has_update=True, version=release.version)

        return UpdateResult(name=name, has_update=False)

    def select_release_to_download(
        self,
        releases: List[Release],
        requested_version: Optional[VersionLike] = None,
        name: str = "",
    ) -> Release:
        """
        选择要下载的发布版本

        指定版本时查找版本号相同的发布版本，否则返回最新的（第一个）发布版本。
        """
        if requested_version:
            wanted = Version.parse(requested_version)
            for release in releases:
                if release.version == wanted:
                    return release
            raise NotFoundError(
                f"找不到指定版本: {name} {wanted}",
                context={"name": name, "version": str(wanted)},
            )

        if not releases:
            raise NotFoundError(
                f"模组没有任何发布版本: {name}", context={"name": name}
            )
        return releases[0]
