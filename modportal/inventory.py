"""
本地模组清单

管理模组目录中的模组文件（name_version.zip）与 mod-list.json 启用列表：
- 安装后保证每个模组只保留一个版本
- 合并磁盘上的模组与持久化的启用状态
- 按模式删除模组文件
"""

import asyncio
import glob
import json
import os
from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from modportal.exceptions import FileStoreError, ValidationError
from modportal.models import InstalledPackage, Version
from modportal.services.archive import INFO_JSON, read_json_entry
from modportal.storage import FileStore


MOD_LIST_FILE = "mod-list.json"
PACKAGE_FILE_PATTERN = "*_*.zip"


def parse_package_file_name(file_name: str) -> Tuple[str, Version]:
    """
    解析模组文件名

    "Foreman_1.1.5.zip" -> ("Foreman", Version(1, 1, 5))
    """
    base = os.path.basename(file_name)
    stem, ext = os.path.splitext(base)
    name, sep, version = stem.rpartition("_")
    if ext != ".zip" or not sep or not name:
        raise ValidationError(
            f"无效的模组文件名: {file_name}", context={"file_name": file_name}
        )
    return name, Version.parse(version)


def parse_enabled(value: Any) -> bool:
    """解析持久化的启用状态（"true" / "false"）"""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def merge_enablement(
    installed: Iterable[InstalledPackage],
    persisted: Iterable[Dict[str, Any]],
) -> List[InstalledPackage]:
    """
    合并本地模组与启用列表

    启用列表中找到同名条目时使用其 enabled 值，否则默认启用。结果按名称排序。
    """
    persisted = list(persisted)
    merged = []
    for package in installed:
        entry = next((e for e in persisted if e.get("name") == package.name), None)
        enabled = parse_enabled(entry.get("enabled")) if entry is not None else True
        merged.append(
            InstalledPackage(
                name=package.name,
                version=package.version,
                enabled=enabled,
                file_name=package.file_name,
                info=package.info,
            )
        )
    return sorted(merged, key=lambda p: p.name)


def serialize_enablement(packages: Iterable[InstalledPackage]) -> Dict[str, Any]:
    """序列化启用列表，布尔值写为字符串 "true" / "false" """
    return {
        "mods": [
            {"name": p.name, "enabled": "true" if p.enabled else "false"}
            for p in packages
        ]
    }


class ModInventory:
    """模组目录管理"""

    def __init__(self, store: FileStore, mod_list_file: str = MOD_LIST_FILE):
        self.store = store
        self.mod_list_file = mod_list_file

    async def enforce_single_version(
        self,
        package_name: str,
        keep_file_name: str,
        allow_multiple_versions: bool = False,
    ) -> List[str]:
        """
        删除模组的其他版本文件，只保留 keep_file_name

        调用期间不能有其他写入者向同一模组的文件名空间添加文件。

        Returns:
            被删除的文件路径
        """
        if allow_multiple_versions:
            return []

        files = await self.store.find(f"{glob.escape(package_name)}_*.zip")
        stale = []
        for path in files:
            if os.path.basename(path) == keep_file_name:
                continue
            try:
                name, _ = parse_package_file_name(path)
            except ValidationError:
                continue
            # foo_bar_1.0.0.zip 不属于 foo
            if name == package_name:
                stale.append(path)

        await asyncio.gather(*(self.store.remove(path) for path in stale))
        for path in stale:
            logger.info(f"[删除] 旧版本 '{path}'")
        return stale

    async def get_installed_mods(self) -> List[InstalledPackage]:
        """根据文件名获取模组目录中的模组名称与版本"""
        packages = []
        for path in await self.store.find(PACKAGE_FILE_PATTERN):
            try:
                name, version = parse_package_file_name(path)
            except ValidationError as e:
                logger.warning(f"[清单] 跳过无法识别的文件 '{path}': {e}")
                continue
            packages.append(
                InstalledPackage(
                    name=name, version=version, file_name=os.path.basename(path)
                )
            )
        return sorted(packages, key=lambda p: p.name)

    async def read_mod_info(self, file_name: str) -> Dict[str, Any]:
        """读取模组 zip 中的 info.json"""
        return read_json_entry(await self.store.read_buffer(file_name), INFO_JSON)

    async def read_mod_infos(self) -> List[Dict[str, Any]]:
        """读取模组目录中所有模组的 info.json，按名称排序"""
        files = await self.store.find(PACKAGE_FILE_PATTERN)
        infos = await asyncio.gather(*(self.read_mod_info(path) for path in files))
        return sorted(infos, key=lambda info: info.get("name", ""))

    async def read_enablement(self) -> List[Dict[str, Any]]:
        """读取启用列表，不存在时创建空列表"""
        if not await self.store.exists(self.mod_list_file):
            await self.store.write(self.mod_list_file, json.dumps({"mods": []}).encode())
            return []

        raw = await self.store.read_buffer(self.mod_list_file)
        try:
            document = json.loads(raw.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise FileStoreError(
                f"启用列表解析失败: {self.mod_list_file}", context={"error": str(e)}
            ) from e
        if not isinstance(document, dict) or not isinstance(document.get("mods", []), list):
            raise FileStoreError(
                f"启用列表格式错误: {self.mod_list_file}",
                context={"type": type(document).__name__},
            )
        return list(document.get("mods", []))

    async def load_installed_mods(self, with_info: bool = True) -> List[InstalledPackage]:
        """读取模组目录中的模组并合并启用状态，with_info 时附带 info.json"""
        installed = await self.get_installed_mods()
        if with_info:
            infos = await asyncio.gather(
                *(self.read_mod_info(p.file_name) for p in installed)
            )
            for package, info in zip(installed, infos):
                package.info = info
        return merge_enablement(installed, await self.read_enablement())

    async def save_mod_list(self, packages: Iterable[InstalledPackage]) -> None:
        """保存启用列表"""
        document = serialize_enablement(packages)
        await self.store.write(
            self.mod_list_file, json.dumps(document, indent=2).encode("utf-8")
        )
        logger.debug(f"[清单] 已保存 {len(document['mods'])} 个模组的启用状态")

    async def remove_matching(
        self, name: str, version: Optional[str] = None
    ) -> List[str]:
        """
        删除匹配的模组文件

        Args:
            name: 模组名称，可以是 glob 模式
            version: 版本，可以是 glob 模式，不指定时删除所有版本
        """
        files = await self.store.find(f"{name}_{version or '*'}.zip")
        await asyncio.gather(*(self.store.remove(path) for path in files))
        for path in files:
            logger.info(f"[删除] '{path}'")
        return files

    async def remove_mods(self, mods: Iterable[Dict[str, Any]]) -> List[str]:
        """批量删除模组，mods 为 [{"name": ..., "version": ...}]"""
        results = await asyncio.gather(
            *(self.remove_matching(mod["name"], mod.get("version")) for mod in mods)
        )
        return [path for removed in results for path in removed]
