"""
文件校验器

实现下载内容的 SHA1 校验。
"""

import hashlib
from typing import Optional


class FileVerifier:
    """文件校验器"""

    @staticmethod
    def calc_sha1(data: bytes) -> str:
        """计算数据的 SHA1 值"""
        return hashlib.sha1(data).hexdigest()

    @staticmethod
    def verify_sha1(data: bytes, expected_sha1: Optional[str]) -> bool:
        """
        校验数据的 SHA1 是否匹配

        Args:
            data: 文件内容
            expected_sha1: 预期的 SHA1 值

        Returns:
            是否匹配（如果没有预期值则返回 True）
        """
        if not expected_sha1:
            return True
        return FileVerifier.calc_sha1(data) == expected_sha1.lower()
