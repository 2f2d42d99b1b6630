"""
文件存储

模组目录与存档目录的异步文件读写、查找、删除。
"""

import glob
import os
from abc import ABC, abstractmethod
from typing import List

import aiofiles
import aiofiles.os

from modportal.exceptions import FileStoreError


class FileStore(ABC):
    """文件存储接口，路径均相对于存储根目录"""

    @abstractmethod
    async def write(self, path: str, data: bytes) -> None:
        pass

    @abstractmethod
    async def find(self, pattern: str) -> List[str]:
        """按 glob 模式查找文件"""
        pass

    @abstractmethod
    async def remove(self, path: str) -> None:
        pass

    @abstractmethod
    async def read_buffer(self, path: str) -> bytes:
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        pass


class LocalFileStore(FileStore):
    """本地目录文件存储"""

    def __init__(self, root: str):
        self.root = root

    def _full_path(self, path: str) -> str:
        return os.path.join(self.root, path)

    async def write(self, path: str, data: bytes) -> None:
        file_path = self._full_path(path)
        try:
            os.makedirs(os.path.dirname(file_path) or ".", exist_ok=True)
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(data)
        except OSError as e:
            # 清理不完整的文件
            if os.path.exists(file_path):
                os.remove(file_path)
            raise FileStoreError(f"写入文件失败: {path}", context={"error": str(e)}) from e

    async def find(self, pattern: str) -> List[str]:
        matches = glob.glob(os.path.join(glob.escape(self.root), pattern))
        return sorted(
            os.path.relpath(match, self.root)
            for match in matches
            if os.path.isfile(match)
        )

    async def remove(self, path: str) -> None:
        try:
            await aiofiles.os.remove(self._full_path(path))
        except OSError as e:
            raise FileStoreError(f"删除文件失败: {path}", context={"error": str(e)}) from e

    async def read_buffer(self, path: str) -> bytes:
        try:
            async with aiofiles.open(self._full_path(path), "rb") as f:
                return await f.read()
        except OSError as e:
            raise FileStoreError(f"读取文件失败: {path}", context={"error": str(e)}) from e

    async def exists(self, path: str) -> bool:
        return os.path.exists(self._full_path(path))
