"""
ModPortal 下载层

包含下载管理、文件校验等功能。
"""

from modportal.download.manager import DownloadManager, DownloadStats
from modportal.download.verifier import FileVerifier

__all__ = [
    "DownloadManager",
    "DownloadStats",
    "FileVerifier",
]
