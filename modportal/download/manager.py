"""
下载管理器

从模组门户下载发布版本文件，报告下载进度并统计下载数据。
"""

from dataclasses import dataclass
from typing import Callable, Optional

import aiohttp
from loguru import logger

from modportal.download.verifier import FileVerifier
from modportal.exceptions import (
    DownloadChecksumError,
    DownloadNetworkError,
    InsufficientCredentialsError,
)
from modportal.models import Credentials
from modportal.models.config import PORTAL_URL


ProgressCallback = Callable[[str, float], None]


@dataclass
class DownloadStats:
    """下载统计"""

    total: int = 0
    completed: int = 0
    failed: int = 0
    bytes_downloaded: int = 0


class DownloadManager:
    """下载管理器"""

    def __init__(
        self,
        portal_url: str = PORTAL_URL,
        session: Optional[aiohttp.ClientSession] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.portal_url = portal_url.rstrip("/")
        self.verifier = FileVerifier()
        self.stats = DownloadStats()
        self._session = session
        self._owned_session = session is None
        self._progress_callback = progress_callback

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    def build_url(self, reference: str) -> str:
        """将发布版本的 download_url 转换为完整地址"""
        if reference.startswith(("http://", "https://")):
            return reference
        return f"{self.portal_url}/{reference.lstrip('/')}"

    async def download(
        self,
        reference: str,
        credentials: Optional[Credentials],
        expected_sha1: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> bytes:
        """
        下载单个文件

        Args:
            reference: 发布版本的 download_url
            credentials: 认证凭据，门户下载必须提供
            expected_sha1: 预期的 SHA1 值
            progress_callback: 进度回调 (reference, 0.0 ~ 1.0)

        Returns:
            文件内容
        """
        if credentials is None:
            raise InsufficientCredentialsError(
                "下载模组需要先认证", context={"reference": reference}
            )

        callback = progress_callback or self._progress_callback
        url = self.build_url(reference)
        self.stats.total += 1
        logger.info(f"[开始] 下载: {reference}")

        try:
            async with self.session.get(url, params=credentials.as_params()) as response:
                if response.status != 200:
                    raise DownloadNetworkError(
                        f"HTTP {response.status}",
                        context={"url": url, "status": response.status},
                    )

                total_size = int(response.headers.get("Content-Length", 0))
                chunks = []
                downloaded = 0
                last_fraction = 0.0

                async for chunk in response.content.iter_chunked(8192):
                    chunks.append(chunk)
                    downloaded += len(chunk)
                    self.stats.bytes_downloaded += len(chunk)

                    if total_size > 0:
                        fraction = downloaded / total_size
                        if fraction - last_fraction >= 0.05:
                            if callback:
                                callback(reference, fraction)
                            logger.debug(f"[进度] {reference}: {fraction:.1%}")
                            last_fraction = fraction
        except aiohttp.ClientError as e:
            self.stats.failed += 1
            logger.error(f"[错误] 下载 '{reference}' 失败: {e}")
            raise DownloadNetworkError(
                f"下载失败: {reference}", context={"url": url, "error": str(e)}
            ) from e
        except DownloadNetworkError:
            self.stats.failed += 1
            logger.error(f"[错误] 下载 '{reference}' 失败")
            raise

        data = b"".join(chunks)
        if not self.verifier.verify_sha1(data, expected_sha1):
            self.stats.failed += 1
            raise DownloadChecksumError(
                f"SHA1 校验失败: {reference}",
                context={"reference": reference, "expected": expected_sha1},
            )

        if callback:
            callback(reference, 1.0)
        self.stats.completed += 1
        logger.success(f"[完成] '{reference}' 下载完成")
        return data

    def get_stats(self) -> DownloadStats:
        """获取下载统计"""
        return self.stats

    async def close(self):
        """关闭 session"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
