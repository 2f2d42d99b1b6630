"""
ModPortal 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息和 JSON 序列化。
"""

from typing import Any, Dict, Optional
import aiohttp


class ModPortalError(Exception):
    """ModPortal 基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(ModPortalError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class ConfigParseError(ConfigError):
    """配置解析错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def _get_default_code(self) -> str:
        return "E102"


class TransportError(ModPortalError):
    """网络或文件协作方的透传错误"""

    def _get_default_code(self) -> str:
        return "E200"


class APIError(TransportError):
    """模组门户 API 错误"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        response: Optional[aiohttp.ClientResponse] = None,
    ):
        super().__init__(message, code, context)
        self.response = response
        if response:
            self.context["status_code"] = response.status
            self.context["url"] = str(response.url)

    def _get_default_code(self) -> str:
        return "E201"


class DownloadError(TransportError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class DownloadNetworkError(DownloadError):
    """下载网络错误"""

    def _get_default_code(self) -> str:
        return "E301"


class DownloadChecksumError(DownloadError):
    """下载校验错误"""

    def _get_default_code(self) -> str:
        return "E302"


class FileStoreError(TransportError):
    """文件读写、删除错误"""

    def _get_default_code(self) -> str:
        return "E303"


class InsufficientCredentialsError(ModPortalError):
    """认证信息不足"""

    def _get_default_code(self) -> str:
        return "E401"


class NotFoundError(ModPortalError):
    """模组或指定版本不存在"""

    def _get_default_code(self) -> str:
        return "E404"


class ValidationError(ModPortalError):
    """验证相关错误"""

    def _get_default_code(self) -> str:
        return "E500"


class MalformedRecordError(ModPortalError):
    """存档二进制记录解析失败"""

    def _get_default_code(self) -> str:
        return "E600"


class ArchiveError(ModPortalError):
    """压缩包读取错误"""

    def _get_default_code(self) -> str:
        return "E601"


__all__ = [
    # 基础异常
    "ModPortalError",
    # 配置异常
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    # 传输异常
    "TransportError",
    "APIError",
    "DownloadError",
    "DownloadNetworkError",
    "DownloadChecksumError",
    "FileStoreError",
    # 业务异常
    "InsufficientCredentialsError",
    "NotFoundError",
    "ValidationError",
    "MalformedRecordError",
    "ArchiveError",
]
