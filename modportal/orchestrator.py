"""
主协调器

整合门户客户端、版本解析、下载、模组目录管理与存档解析。
配置与认证凭据保存在实例上，多个管理器可以互不干扰地同时存在。
"""

import asyncio
import os
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from modportal.download import DownloadManager
from modportal.inventory import ModInventory
from modportal.models import (
    Credentials,
    InstalledPackage,
    ModPortalConfig,
    Package,
    Release,
    SaveModEntry,
    SaveModList,
    UpdateResult,
)
from modportal.services import (
    DependencyResolver,
    ModPortalClient,
    SaveArchiveDecoder,
    VersionResolver,
)
from modportal.storage import FileStore, LocalFileStore


class ModPortalManager:
    """ModPortal 主协调器"""

    def __init__(
        self,
        config: ModPortalConfig,
        client: Optional[ModPortalClient] = None,
        downloader: Optional[DownloadManager] = None,
        mod_store: Optional[FileStore] = None,
        save_store: Optional[FileStore] = None,
    ):
        self.config = config
        self.client = client or ModPortalClient(
            portal_url=config.portal_url,
            auth_url=config.auth_url,
            matchmaking_url=config.matchmaking_url,
        )
        self.downloader = downloader or DownloadManager(portal_url=config.portal_url)
        self.mod_store = mod_store or LocalFileStore(config.mod_path)
        self.save_store = save_store or LocalFileStore(config.save_path)
        self.inventory = ModInventory(self.mod_store)
        self.version_resolver = VersionResolver()
        self.dep_resolver = DependencyResolver(self.client, self.version_resolver)
        self.save_decoder = SaveArchiveDecoder()
        self.credentials: Optional[Credentials] = None

    @property
    def is_authenticated(self) -> bool:
        return self.credentials is not None

    async def authenticate(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        token: Optional[str] = None,
    ) -> Credentials:
        """使用参数或配置中的 username / token / password 认证"""
        self.credentials = await self.client.authenticate(
            username or self.config.username,
            password=password or self.config.password,
            token=token or self.config.token,
            require_ownership=self.config.require_ownership,
        )
        logger.success(f"[认证] 已认证为 {self.credentials.username}")
        return self.credentials

    async def search_mods(self, query: str = "", **params) -> List[Package]:
        return await self.client.search_packages(query, **params)

    async def get_games(self) -> Any:
        """获取联机大厅中的游戏，需要先认证"""
        if self.credentials is None:
            await self.authenticate()
        return await self.client.get_games(self.credentials)

    async def get_game_details(self, game_id: int) -> Any:
        return await self.client.get_game_details(game_id)

    # 更新

    async def check_update(
        self,
        name: str,
        version: str,
        game_version: Optional[str] = None,
    ) -> UpdateResult:
        """检查单个模组是否有兼容指定游戏版本的更新"""
        package = await self.client.get_package(name)
        result = self.version_resolver.check_for_update(
            version,
            package.releases,
            game_version or self.config.game_version,
            name=name,
        )
        result.package = package
        if result.has_update:
            logger.info(f"[更新] {name}: 有可用更新 {version} --> {result.version}")
        else:
            logger.info(f"[更新] {name}: 已是最新")
        return result

    async def check_updates(
        self,
        mods: Iterable[Dict[str, str]],
        game_version: Optional[str] = None,
    ) -> List[UpdateResult]:
        """批量检查更新，mods 为 [{"name": ..., "version": ...}]"""
        return list(
            await asyncio.gather(
                *(
                    self.check_update(mod["name"], mod["version"], game_version)
                    for mod in mods
                )
            )
        )

    async def update_mod(
        self,
        name: str,
        version: str,
        game_version: Optional[str] = None,
    ) -> UpdateResult:
        """有更新时下载更新版本"""
        result = await self.check_update(name, version, game_version)
        if result.has_update:
            release = self.version_resolver.select_release_to_download(
                result.package.releases, result.version, name=name
            )
            await self.download_release(name, release)
        return result

    async def update_mods(
        self,
        mods: Iterable[Dict[str, str]],
        game_version: Optional[str] = None,
    ) -> List[UpdateResult]:
        return list(
            await asyncio.gather(
                *(
                    self.update_mod(mod["name"], mod["version"], game_version)
                    for mod in mods
                )
            )
        )

    # 下载

    async def download_mod(self, name: str, version: Optional[str] = None) -> Package:
        """下载模组的指定版本（默认最新）"""
        package = await self.client.get_package(name)
        release = self.version_resolver.select_release_to_download(
            package.releases, version, name=name
        )
        await self.download_release(name, release)
        return package

    async def download_mods(self, mods: Iterable[Dict[str, Any]]) -> List[Package]:
        """批量下载，mods 为 [{"name": ..., "version": ...}]，version 可省略"""
        return list(
            await asyncio.gather(
                *(self.download_mod(mod["name"], mod.get("version")) for mod in mods)
            )
        )

    async def download_release(self, name: str, release: Release) -> str:
        """
        下载发布版本并写入模组目录，之后删除该模组的其他版本

        Returns:
            写入的文件名
        """
        file_name = release.file_name
        if await self.mod_store.exists(file_name):
            existing = await self.mod_store.read_buffer(file_name)
            if release.sha1 and self.downloader.verifier.verify_sha1(
                existing, release.sha1
            ):
                logger.info(f"[跳过] '{file_name}' 已存在且校验通过")
                await self.inventory.enforce_single_version(
                    name, file_name, self.config.allow_multiple_versions
                )
                return file_name

        data = await self.downloader.download(
            release.download_url, self.credentials, expected_sha1=release.sha1
        )
        await self.mod_store.write(file_name, data)
        await self.inventory.enforce_single_version(
            name, file_name, self.config.allow_multiple_versions
        )
        logger.success(f"[安装] {name} {release.version} -> {file_name}")
        return file_name

    # 依赖

    async def get_dependencies(
        self,
        name: str,
        version: Optional[str] = None,
        include_optional: Optional[bool] = None,
    ) -> List[Dict[str, str]]:
        if include_optional is None:
            include_optional = self.config.include_optional
        return await self.dep_resolver.get_dependencies(name, version, include_optional)

    async def download_dependencies(
        self,
        name: str,
        version: Optional[str] = None,
        include_optional: Optional[bool] = None,
    ) -> List[Package]:
        """下载模组的所有依赖"""
        dependencies = await self.get_dependencies(name, version, include_optional)
        if dependencies:
            logger.info(f"[依赖] 发现 {len(dependencies)} 个依赖需要下载")
        return await self.download_mods(dependencies)

    # 模组目录

    async def remove_mods(self, mods: Iterable[Dict[str, Any]]) -> List[str]:
        return await self.inventory.remove_mods(mods)

    async def get_installed_mods(self) -> List[InstalledPackage]:
        return await self.inventory.get_installed_mods()

    async def load_installed_mods(self, with_info: bool = True) -> List[InstalledPackage]:
        return await self.inventory.load_installed_mods(with_info)

    async def save_mod_list(self, packages: Iterable[InstalledPackage]) -> None:
        await self.inventory.save_mod_list(packages)

    # 存档

    async def get_mods_from_save_file(self, file_name: str) -> SaveModList:
        """读取存档文件（含 .zip）中的模组列表"""
        raw = await self.save_store.read_buffer(file_name)
        mods = self.save_decoder.read_save(raw)
        name = os.path.basename(file_name)
        if name.endswith(".zip"):
            name = name[: -len(".zip")]
        return SaveModList(name=name, mods=mods)

    async def get_mods_from_save(self, save_name: str) -> List[SaveModEntry]:
        """读取存档（不含 .zip）中的模组列表"""
        save = await self.get_mods_from_save_file(f"{save_name}.zip")
        return save.mods

    async def get_mods_from_saves(self) -> List[SaveModList]:
        """读取存档目录中所有存档的模组列表"""
        files = await self.save_store.find("*.zip")
        return list(
            await asyncio.gather(*(self.get_mods_from_save_file(f) for f in files))
        )

    async def close(self):
        await self.client.close()
        await self.downloader.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
